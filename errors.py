"""
Error kinds for ShareLedger
"""


class LedgerError(Exception):
    """Base class for all recoverable ShareLedger errors"""


class StoreUnavailable(LedgerError):
    """Raised when the ledger store cannot list, insert or delete records"""


class ValidationError(LedgerError, ValueError):
    """Raised when user input or a proposed share mapping is invalid"""


class EmptySelection(LedgerError):
    """Raised when an export is attempted with no records selected"""
