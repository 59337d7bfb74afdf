"""
Ledger error taxonomy.

Every rejection raised by TokenLedger is a LedgerError subclass and is
raised before any state is touched, so a caller that catches one can rely on
the ledger being exactly as it was before the call.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for all rejected ledger operations."""


class InvalidAddress(LedgerError, ValueError):
    """The null address was used where a real participant is required."""


class InvalidSender(InvalidAddress):
    pass


class InvalidRecipient(InvalidAddress):
    pass


class InvalidSpender(InvalidAddress):
    pass


class InvalidAccount(InvalidAddress):
    pass


class InvalidAmount(LedgerError, ValueError):
    """Amount is not an int in the unsigned 256-bit range."""


class InsufficientBalance(LedgerError):
    pass


class AllowanceExceeded(LedgerError):
    pass


class SupplyOverflow(LedgerError):
    pass


class Unauthorized(LedgerError, PermissionError):
    """Issuer-only operation called by someone else."""


class ConfigError(ValueError):
    pass
