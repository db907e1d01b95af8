"""
Ticket Builder

Assembles the summary document ("ticket") of a session from the
ledger: identification, events, per-stream statistics and call-level
data (connectivity RTT, packet loss, bitrate, traffic, network path).

DESIGN RULES:
- Read-only: never mutates the ledger
- Computed fresh on every call (a view, not stored state)
- Neutral values on empty sequences
"""

import json
import logging
import math
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel

from exporter.assembler import UNIT_MS, assemble_streams, stat_block
from ledger.session_ledger import SessionLedger
from schemas.config import ExporterConfig
from schemas.report import Direction, MediaKind, StatType
from stats.network import get_path, get_remote_path
from stats.reducers import Reports, get_last_report, last_of_reports
from stats.rtt import average_rtt_connectivity

logger = logging.getLogger(__name__)

VERSION_EXPORTER = "1.0"

UNIT_PERCENT = {"avg": "percent"}
UNIT_KBS = {"avg": "kbs", "min": "kbs", "max": "kbs", "volatility": "percent"}
UNIT_KBYTES = {"avg": "KBytes", "min": "KBytes", "max": "KBytes", "volatility": "percent"}


def inbound_packet_counts(reports: Reports, kind: MediaKind) -> Tuple[int, int]:
    """
    (lost, received) totals over the inbound streams of the last report.

    Each stream contributes its most recent cumulative counters.
    """
    if not reports:
        return 0, 0

    lost = 0
    received = 0
    section = StatType(MediaKind(kind).value)
    for ssrc, metric in get_last_report(reports).streams(kind).items():
        if Direction(metric.direction) is not Direction.INBOUND:
            continue
        lost += last_of_reports(reports, section, "total_packets_lost_in", ssrc) or 0
        received += last_of_reports(reports, section, "total_packets_in", ssrc) or 0
    return lost, received


def packet_loss_percent(lost: float, received: float) -> float:
    """lost / (lost + received) in percent, rounded half up to 2 decimals; 0 when undefined."""
    total = lost + received
    if total == 0:
        return 0
    ratio = lost / total * 100
    if math.isnan(ratio):
        return 0
    # half up: 3.125 -> 3.13
    return math.floor(ratio * 100 + 0.5) / 100


def _directional(reports: Reports, key_in: str, key_out: str, unit: Dict[str, str]) -> Dict[str, Any]:
    return {
        "in": stat_block(reports, StatType.DATA, key_in),
        "out": stat_block(reports, StatType.DATA, key_out),
        "unit": dict(unit),
    }


def build_data_section(reports: Reports) -> Dict[str, Any]:
    """Call-level aggregates."""
    rtt = stat_block(
        reports,
        StatType.DATA,
        "delta_rtt_connectivity_ms",
        average=average_rtt_connectivity(reports),
    )
    rtt["_unit"] = dict(UNIT_MS)

    packets_lost: Dict[str, Any] = {}
    for kind in MediaKind:
        lost, received = inbound_packet_counts(reports, kind)
        packets_lost[kind.value] = {"in": {"avg": packet_loss_percent(lost, received)}}
    packets_lost["unit"] = dict(UNIT_PERCENT)

    return {
        "rtt": rtt,
        "packetsLost": packets_lost,
        "bitrate": _directional(reports, "delta_kbs_in", "delta_kbs_out", UNIT_KBS),
        "traffic": _directional(reports, "delta_KBytes_in", "delta_KBytes_out", UNIT_KBYTES),
        "network": {
            "localConnection": get_path(reports),
            "remoteConnection": get_remote_path(reports),
        },
    }


def _isoformat(value: Any) -> Any:
    return value.isoformat() if isinstance(value, datetime) else value


def build_ticket(ledger: SessionLedger, config: ExporterConfig) -> Dict[str, Any]:
    """
    Build the ticket of a session.

    Args:
        ledger: Source of reports, events and timestamps (read only)
        config: Identification and the `record` flag

    Returns:
        Nested dict; `details.reports` holds the raw reports only when
        `config.record` is set
    """
    reports = ledger.reports
    logger.debug(f"Generate ticket from {len(reports)} reports")

    return {
        "version": VERSION_EXPORTER,
        "started": _isoformat(ledger.started_at),
        "ended": _isoformat(ledger.ended_at),
        "ua": {
            "agent": config.agent,
            "pname": config.pname,
            "user_id": config.uid,
        },
        "call": {
            "call_id": config.cid,
            "events": ledger.events,
        },
        "details": {
            "count": len(reports),
            "reports": list(reports) if config.record else [],
            "reference": ledger.get_reference_report(),
        },
        "ssrc": assemble_streams(reports),
        "data": build_data_section(reports),
    }


def _json_serializer(obj: Any) -> Any:
    """Custom JSON serializer for reports, events and datetimes."""
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True)
    if isinstance(obj, datetime):
        return obj.isoformat()
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return str(obj)


def ticket_to_json(ticket: Dict[str, Any], indent: Optional[int] = None) -> str:
    """Serialize a ticket to JSON."""
    return json.dumps(ticket, default=_json_serializer, indent=indent)
