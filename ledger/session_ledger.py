"""
Session Ledger

In-memory, append-only store of the reports and custom events of one
session, plus its lifecycle timestamps and a reference report.

DESIGN RULES:
- Append-only (only reset() discards reports)
- Reports are validated on the way in, never mutated afterwards
- Single caller: no internal locking
- No persistence
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from schemas.config import ExporterConfig
from schemas.errors import SchemaViolation
from schemas.report import Direction, MediaKind, MetricSnapshot, parse_snapshot

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionLedger:
    """
    Owns the report sequence of a session.

    Reports are only retained when `config.ticket` is enabled, so callers
    who never ask for a ticket do not accumulate memory.
    """

    def __init__(self, config: Optional[ExporterConfig] = None, clock: Optional[Clock] = None):
        """
        Initialize an empty ledger.

        Args:
            config: Exporter configuration. Defaults to ExporterConfig().
            clock: Returns the current instant. Defaults to UTC now.
        """
        self._config = config or ExporterConfig()
        self._clock = clock or utc_now
        self._reports: List[MetricSnapshot] = []
        self._events: List[Any] = []
        self._reference_report: Optional[MetricSnapshot] = None
        self._streams: Dict[str, Tuple[MediaKind, Direction]] = {}
        self._started_at: Optional[datetime] = None
        self._ended_at: Optional[datetime] = None

    @property
    def config(self) -> ExporterConfig:
        return self._config

    def update_config(self, config: ExporterConfig) -> None:
        """Replace the configuration; retained reports are kept."""
        self._config = config

    @property
    def reports(self) -> Tuple[MetricSnapshot, ...]:
        """Read-only view of the sequence, oldest first."""
        return tuple(self._reports)

    @property
    def events(self) -> List[Any]:
        return list(self._events)

    @property
    def started_at(self) -> Optional[datetime]:
        return self._started_at

    @property
    def ended_at(self) -> Optional[datetime]:
        return self._ended_at

    # --- Lifecycle ---

    def start(self) -> datetime:
        """Stamp the session start and return it."""
        self._started_at = self._clock()
        logger.info(f"Session started at {self._started_at.isoformat()}")
        return self._started_at

    def stop(self) -> datetime:
        """Stamp the session end and return it."""
        self._ended_at = self._clock()
        logger.info(f"Session stopped at {self._ended_at.isoformat()}")
        return self._ended_at

    def reset(self) -> None:
        """Discard reports, reference report and timestamps. Events are kept."""
        logger.info(f"Resetting ledger ({len(self._reports)} reports dropped)")
        self._reports = []
        self._reference_report = None
        self._streams = {}
        self._started_at = None
        self._ended_at = None

    # --- Ingestion ---

    def add_report(self, report: Any) -> None:
        """
        Append a report when ticket retention is enabled.

        Args:
            report: MetricSnapshot or a mapping with the same shape

        Raises:
            SchemaViolation: malformed report, timestamp going backwards,
                a stream changing direction, or an ssrc reused across media kinds
        """
        if not self._config.ticket:
            return

        snapshot = parse_snapshot(report)
        self._check_order(snapshot)
        self._check_streams(snapshot)

        logger.debug(f"Add report at {snapshot.timestamp.isoformat()}")
        self._reports.append(snapshot)

    def add_custom_event(self, event: Any) -> None:
        """Append an opaque event to the session timeline."""
        self._events.append(event)

    def _check_order(self, snapshot: MetricSnapshot) -> None:
        if not self._reports:
            return
        previous = self._reports[-1].timestamp
        try:
            going_back = snapshot.timestamp < previous
        except TypeError as exc:
            raise SchemaViolation(
                "Cannot compare naive and timezone-aware report timestamps"
            ) from exc
        if going_back:
            raise SchemaViolation(
                f"Report at {snapshot.timestamp.isoformat()} precedes "
                f"the last report at {previous.isoformat()}"
            )

    def _check_streams(self, snapshot: MetricSnapshot) -> None:
        # an ssrc keeps one media kind and one direction for the whole session
        seen: Dict[str, Tuple[MediaKind, Direction]] = {}
        for kind in MediaKind:
            for ssrc, metric in snapshot.streams(kind).items():
                direction = Direction(metric.direction)
                if ssrc in seen:
                    raise SchemaViolation(
                        f"Stream {ssrc} listed as both {seen[ssrc][0].value} and {kind.value}"
                    )
                known = self._streams.get(ssrc)
                if known is not None and known[0] is not kind:
                    raise SchemaViolation(
                        f"Stream {ssrc} changed kind from {known[0].value} to {kind.value}"
                    )
                if known is not None and known[1] is not direction:
                    raise SchemaViolation(
                        f"Stream {kind.value}/{ssrc} changed direction "
                        f"from {known[1].value} to {direction.value}"
                    )
                seen[ssrc] = (kind, direction)
        self._streams.update(seen)

    # --- Reference report ---

    def save_reference_report(self, report: Optional[MetricSnapshot]) -> None:
        """Keep a caller-chosen report as a baseline (stored by reference)."""
        self._reference_report = report

    def get_reference_report(self) -> Optional[MetricSnapshot]:
        return self._reference_report

    # --- Accessors ---

    def get_last_report(self) -> Optional[MetricSnapshot]:
        return self._reports[-1] if self._reports else None

    def get_before_last_report(self) -> Optional[MetricSnapshot]:
        return self._reports[-2] if len(self._reports) > 1 else None

    def get_reports_number(self) -> int:
        return len(self._reports)
