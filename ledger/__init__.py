"""
Santa Token Ledger Package

Provides:
- TokenLedger: balances, allowances, transfers, issuer-only mint/burn
- EventLog: append-only Transfer / Approval events
- ledger_config: construction settings from YAML + env
- ledger_integrity: invariant audit and event replay
- wallet_view: decimal display scaling and balance snapshots
"""

from ledger.event_log import APPROVAL, TRANSFER, EventLog, LedgerEvent
from ledger.ledger_errors import (
    AllowanceExceeded,
    ConfigError,
    InsufficientBalance,
    InvalidAccount,
    InvalidAddress,
    InvalidAmount,
    InvalidRecipient,
    InvalidSender,
    InvalidSpender,
    LedgerError,
    SupplyOverflow,
    Unauthorized,
)
from ledger.token_ledger import DECIMALS, NULL_ADDRESS, UINT256_MAX, TokenLedger

__all__ = [
    "APPROVAL",
    "TRANSFER",
    "DECIMALS",
    "NULL_ADDRESS",
    "UINT256_MAX",
    "AllowanceExceeded",
    "ConfigError",
    "EventLog",
    "InsufficientBalance",
    "InvalidAccount",
    "InvalidAddress",
    "InvalidAmount",
    "InvalidRecipient",
    "InvalidSender",
    "InvalidSpender",
    "LedgerError",
    "LedgerEvent",
    "SupplyOverflow",
    "TokenLedger",
    "Unauthorized",
]
