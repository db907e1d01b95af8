"""
Error Taxonomy

Exceptions raised by the ticket engine.

DESIGN RULES:
- Data absence is NOT an error (reducers return neutral values)
- Malformed input fails fast at ingestion
"""


class TicketError(Exception):
    """Base class for every error raised by the ticket engine."""


class NoReportsAvailable(TicketError):
    """Raised when the last report is requested from an empty sequence."""


class SchemaViolation(TicketError):
    """Raised when a report or a metric does not match the expected shape."""
