"""
Exporter Configuration

Options recognized by the ledger and the ticket builder, plus the
identifier provider used to fill default peer/call/user identifiers.

DESIGN RULES:
- No process-wide identifier state (providers are injected)
- Timing hints are informational only (scheduling is external)
"""

import uuid
from abc import ABC, abstractmethod
from itertools import count
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from app.core.config import Settings


# Minimum polling interval accepted (ms)
MIN_REFRESH_EVERY_MS = 1000


class IdProvider(ABC):
    """
    Base identifier provider.

    Calling the provider with a prefix returns a new identifier
    such as "p-1a2b3c4d".
    """

    @abstractmethod
    def __call__(self, prefix: str) -> str:
        pass


class ShortIdProvider(IdProvider):
    """Random short identifiers backed by uuid4."""

    def __init__(self, length: int = 8):
        self._length = length

    def __call__(self, prefix: str) -> str:
        return f"{prefix}-{uuid.uuid4().hex[:self._length]}"


class SequentialIdProvider(IdProvider):
    """Deterministic identifiers ("p-1", "c-2", ...), handy for tests and replays."""

    def __init__(self, start: int = 1):
        self._counter = count(start)

    def __call__(self, prefix: str) -> str:
        return f"{prefix}-{next(self._counter)}"


class ExporterConfig(BaseModel):
    """
    Configuration of an exporter session.

    Accepts both snake_case names and the camelCase aliases used by
    collectors (refreshEvery, startAfter, stopAfter).
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    refresh_every: int = Field(default=2000, alias="refreshEvery", description="Polling interval hint (ms)")
    start_after: int = Field(default=0, alias="startAfter", description="Delay before the first poll (ms)")
    stop_after: int = Field(default=-1, alias="stopAfter", description="Max polling duration (ms), -1 until stop()")
    verbose: bool = False
    pname: Optional[str] = Field(default=None, description="Peer connection name")
    cid: Optional[str] = Field(default=None, description="Call identifier")
    uid: Optional[str] = Field(default=None, description="User identifier")
    record: bool = Field(default=False, description="Include raw reports in the ticket")
    ticket: bool = Field(default=True, description="Retain reports for ticket generation")
    passthrough: Dict[str, List[str]] = Field(default_factory=dict, description="Raw fields copied by the collector")
    agent: Optional[str] = Field(default=None, description="Environment identification supplied by the caller")

    @field_validator("refresh_every")
    @classmethod
    def _check_refresh_every(cls, value: int) -> int:
        if value < MIN_REFRESH_EVERY_MS:
            raise ValueError(f"refreshEvery must be >= {MIN_REFRESH_EVERY_MS} ms")
        return value

    def with_identifiers(self, id_provider: Optional[IdProvider] = None) -> "ExporterConfig":
        """
        Return a copy where missing pname/cid/uid are generated.

        Args:
            id_provider: Source of identifiers. Defaults to ShortIdProvider.
        """
        provider = id_provider or ShortIdProvider()
        updates: Dict[str, Any] = {}
        if not self.pname:
            updates["pname"] = provider("p")
        if not self.cid:
            updates["cid"] = provider("c")
        if not self.uid:
            updates["uid"] = provider("u")
        return self.model_copy(update=updates) if updates else self

    @classmethod
    def build(
        cls,
        options: Optional[Dict[str, Any]] = None,
        id_provider: Optional[IdProvider] = None,
    ) -> "ExporterConfig":
        """Validate raw options and fill default identifiers."""
        return cls.model_validate(options or {}).with_identifiers(id_provider)

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        id_provider: Optional[IdProvider] = None,
        **overrides: Any,
    ) -> "ExporterConfig":
        """
        Seed a configuration from application settings.

        Keyword overrides win over settings values.
        """
        options: Dict[str, Any] = {
            "refresh_every": settings.default_refresh_every_ms,
            "record": settings.default_record,
            "ticket": settings.default_ticket,
        }
        options.update(overrides)
        return cls.build(options, id_provider)

