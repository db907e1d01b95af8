"""
Directional Metric Assembler

Builds the per-stream section of a ticket: one block per ssrc of the
last report, shaped by media kind and direction.

    inbound audio   -> jitter, mos{emodel, effective}
    outbound audio  -> jitter, rtt
    inbound video   -> jitter
    outbound video  -> jitter, rtt

DESIGN RULES:
- Pure, read-only over the report sequence
- Every numeric block carries a `_unit` sibling
"""

from typing import Any, Dict, Optional

from schemas.report import Direction, MediaKind, StatType
from stats.reducers import (
    Reports,
    average_values_of_reports,
    get_last_report,
    max_value_of_reports,
    min_value_of_reports,
    volatility_values_of_reports,
)
from stats.rtt import average_rtt

UNIT_MS = {"avg": "ms", "min": "ms", "max": "ms", "volatility": "percent"}
UNIT_MOS = {"avg": "number (1-5)", "min": "number (1-5)", "max": "number (1-5)", "volatility": "percent"}

JITTER_FIELD = {
    Direction.INBOUND: "delta_jitter_ms_in",
    Direction.OUTBOUND: "delta_jitter_ms_out",
}
RTT_FIELD = "delta_rtt_ms_out"
MOS_EMODEL_FIELD = "mos_emodel_in"
MOS_EFFECTIVE_FIELD = "mos_in"


def stat_block(
    reports: Reports,
    kind: StatType,
    key: str,
    ssrc: Optional[str] = None,
    average: Any = None,
) -> Dict[str, Any]:
    """
    avg / min / max / volatility of one field.

    Args:
        average: Precomputed average replacing the plain mean (e.g. RTT)
    """
    return {
        "avg": average_values_of_reports(reports, kind, key, ssrc=ssrc) if average is None else average,
        "min": min_value_of_reports(reports, kind, key, ssrc),
        "max": max_value_of_reports(reports, kind, key, ssrc),
        "volatility": volatility_values_of_reports(reports, kind, key, ssrc),
    }


def _jitter(reports: Reports, kind: MediaKind, direction: Direction, ssrc: str) -> Dict[str, Any]:
    block = stat_block(reports, StatType(kind.value), JITTER_FIELD[direction], ssrc)
    block["_unit"] = dict(UNIT_MS)
    return block


def _rtt(reports: Reports, kind: MediaKind, ssrc: str) -> Dict[str, Any]:
    block = stat_block(
        reports,
        StatType(kind.value),
        RTT_FIELD,
        ssrc,
        average=average_rtt(reports, kind, ssrc),
    )
    block["_unit"] = dict(UNIT_MS)
    return block


def _mos(reports: Reports, ssrc: str) -> Dict[str, Any]:
    return {
        "emodel": stat_block(reports, StatType.AUDIO, MOS_EMODEL_FIELD, ssrc),
        "effective": stat_block(reports, StatType.AUDIO, MOS_EFFECTIVE_FIELD, ssrc),
        "_unit": dict(UNIT_MOS),
    }


def assemble_stream(reports: Reports, kind: MediaKind, direction: Direction, ssrc: str) -> Dict[str, Any]:
    """Build the ticket block of one stream."""
    kind = MediaKind(kind)
    direction = Direction(direction)
    block: Dict[str, Any] = {"type": kind.value, "direction": direction.value}

    if direction is Direction.INBOUND:
        block["jitter"] = _jitter(reports, kind, direction, ssrc)
        # video has no MOS estimate
        if kind is MediaKind.AUDIO:
            block["mos"] = _mos(reports, ssrc)
    elif direction is Direction.OUTBOUND:
        block["jitter"] = _jitter(reports, kind, direction, ssrc)
        block["rtt"] = _rtt(reports, kind, ssrc)
    else:
        raise ValueError(f"Unhandled direction: {direction}")

    return block


def assemble_streams(reports: Reports) -> Dict[str, Dict[str, Any]]:
    """
    Build the ssrc section: audio streams first, then video streams,
    as listed in the last report. Empty when there are no reports.
    """
    if not reports:
        return {}

    last_report = get_last_report(reports)
    streams: Dict[str, Dict[str, Any]] = {}
    for kind in (MediaKind.AUDIO, MediaKind.VIDEO):
        for ssrc, metric in last_report.streams(kind).items():
            streams[ssrc] = assemble_stream(reports, kind, Direction(metric.direction), ssrc)
    return streams
