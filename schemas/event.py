"""
Custom Events

Caller-supplied timeline entries attached to a session.
The ledger stores any object as-is; this type is a convenience.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class CustomEvent:
    """
    Opaque, timestamped label (e.g. "mute", "ice-restart").

    Never interpreted by the ticket engine.
    """
    name: str
    at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    category: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for export."""
        return {
            "name": self.name,
            "at": self.at.isoformat(),
            "category": self.category,
            "details": self.details,
        }
