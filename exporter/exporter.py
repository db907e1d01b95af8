"""
Exporter

Single entry point for collectors: feed reports and events in,
read the ticket out.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from exporter.ticket import build_ticket
from ledger.session_ledger import Clock, SessionLedger
from schemas.config import ExporterConfig, IdProvider, ShortIdProvider
from schemas.report import MetricSnapshot


class Exporter:
    """
    Session-scoped exporter.

    Wraps a SessionLedger and builds tickets from it on demand.
    """

    def __init__(
        self,
        config: Optional[ExporterConfig] = None,
        clock: Optional[Clock] = None,
        id_provider: Optional[IdProvider] = None,
    ):
        self._id_provider = id_provider or ShortIdProvider()
        config = (config or ExporterConfig()).with_identifiers(self._id_provider)
        self._ledger = SessionLedger(config, clock=clock)

    @property
    def config(self) -> ExporterConfig:
        return self._ledger.config

    @property
    def ledger(self) -> SessionLedger:
        return self._ledger

    def update_config(self, config: ExporterConfig) -> None:
        """Replace the configuration; missing identifiers are generated."""
        self._ledger.update_config(config.with_identifiers(self._id_provider))

    def start(self) -> datetime:
        return self._ledger.start()

    def stop(self) -> datetime:
        return self._ledger.stop()

    def reset(self) -> None:
        self._ledger.reset()

    def add_report(self, report: Any) -> None:
        self._ledger.add_report(report)

    def add_custom_event(self, event: Any) -> None:
        self._ledger.add_custom_event(event)

    def save_reference_report(self, report: Optional[MetricSnapshot]) -> None:
        self._ledger.save_reference_report(report)

    def get_reference_report(self) -> Optional[MetricSnapshot]:
        return self._ledger.get_reference_report()

    def get_last_report(self) -> Optional[MetricSnapshot]:
        return self._ledger.get_last_report()

    def get_before_last_report(self) -> Optional[MetricSnapshot]:
        return self._ledger.get_before_last_report()

    def get_reports_number(self) -> int:
        return self._ledger.get_reports_number()

    @property
    def ticket(self) -> Dict[str, Any]:
        """Summary document of the session, computed from the current reports."""
        return build_ticket(self._ledger, self.config)
