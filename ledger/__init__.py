# Ledger Package
from ledger.session_ledger import SessionLedger

__all__ = ["SessionLedger"]
