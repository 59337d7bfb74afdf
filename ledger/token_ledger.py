"""
Token ledger

Balances and allowances for a single fungible token:
- direct transfers and delegated transfers (approve / transfer_from)
- issuer-only mint and burn

Every operation is atomic. Checks run first, then state is mutated, then
the event is recorded; a failed check raises a LedgerError and leaves the
ledger untouched. One lock serializes all calls, reads included.

Subscribers are notified after that lock is released, so a subscriber may
call back into the ledger; it still sees every event in commit order.
"""

from __future__ import annotations
import threading
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

from ledger.event_log import APPROVAL, TRANSFER, EventLog
from ledger.ledger_errors import (
    AllowanceExceeded,
    InsufficientBalance,
    InvalidAccount,
    InvalidAmount,
    InvalidRecipient,
    InvalidSender,
    InvalidSpender,
    LedgerError,
    SupplyOverflow,
    Unauthorized,
)

if TYPE_CHECKING:
    from ledger.ledger_config import LedgerConfig

NULL_ADDRESS = "0x0000000000000000000000000000000000000000"
DECIMALS = 18
UINT256_MAX = (1 << 256) - 1


def log(msg: str) -> None:
    print(f"[TokenLedger] {msg}", flush=True)


def is_null(address: Optional[str]) -> bool:
    return not address or address == NULL_ADDRESS


def _u256(amount: Any) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmount(f"Amount must be an integer, got {type(amount).__name__}")
    if amount < 0 or amount > UINT256_MAX:
        raise InvalidAmount(f"Amount out of uint256 range: {amount}")
    return amount


class TokenLedger:
    def __init__(
        self,
        name: str,
        symbol: str,
        initial_supply: int,
        issuer: str,
    ) -> None:
        supply = _u256(initial_supply)
        if supply > UINT256_MAX // (10 ** DECIMALS):
            raise InvalidAmount(f"Initial supply too large for {DECIMALS} decimals: {initial_supply}")

        self._lock = threading.Lock()
        self._name = name
        self._symbol = symbol
        self._issuer = issuer
        self._total_supply = supply * (10 ** DECIMALS)
        self._balances: Dict[str, int] = {issuer: self._total_supply}
        self._allowances: Dict[Tuple[str, str], int] = {}
        # owned outright: replay in ledger_integrity assumes only this ledger writes here
        self.events = EventLog()

        log(f"Created {symbol} ({name}) supply={self._total_supply} issuer={issuer}")
        self.events.record(TRANSFER, self._total_supply, **{"from": NULL_ADDRESS, "to": issuer})
        self.events.flush()

    @classmethod
    def from_config(cls, cfg: LedgerConfig) -> "TokenLedger":
        return cls(cfg.name, cfg.symbol, cfg.initial_supply, cfg.issuer)

    # ------------------------------------------------------------------ #
    # Metadata
    # ------------------------------------------------------------------ #
    @property
    def name(self) -> str:
        return self._name

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def decimals(self) -> int:
        return DECIMALS

    @property
    def issuer(self) -> str:
        return self._issuer

    @property
    def total_supply(self) -> int:
        with self._lock:
            return self._total_supply

    def metadata(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "name": self._name,
                "symbol": self._symbol,
                "decimals": DECIMALS,
                "total_supply": self._total_supply,
                "issuer": self._issuer,
            }

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #
    def balance_of(self, account: str) -> int:
        with self._lock:
            return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        with self._lock:
            return self._allowances.get((owner, spender), 0)

    def balances(self) -> Dict[str, int]:
        """Copy of every non-zero balance."""
        with self._lock:
            return {acct: amt for acct, amt in self._balances.items() if amt}

    def allowances(self) -> Dict[Tuple[str, str], int]:
        with self._lock:
            return dict(self._allowances)

    def state(self) -> Dict[str, Any]:
        """Consistent copy of supply, balances, allowances and events."""
        with self._lock:
            return {
                "total_supply": self._total_supply,
                "balances": {acct: amt for acct, amt in self._balances.items() if amt},
                "allowances": dict(self._allowances),
                "events": self.events.all_events(),
            }

    def is_issuer(self, identity: Optional[str]) -> bool:
        return identity is not None and identity == self._issuer

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #
    def transfer(self, caller: str, recipient: str, amount: int) -> bool:
        with self._lock:
            try:
                amount = _u256(amount)
                if is_null(caller):
                    raise InvalidSender("Transfer from the zero address")
                if is_null(recipient):
                    raise InvalidRecipient("Transfer to the zero address")
                if self._balances.get(caller, 0) < amount:
                    raise InsufficientBalance("Insufficient balance")
            except LedgerError as e:
                self._rejected("transfer", caller, e)
                raise

            self._move(caller, recipient, amount)
            self.events.record(TRANSFER, amount, **{"from": caller, "to": recipient})
        self.events.flush()
        return True

    def approve(self, caller: str, spender: str, amount: int) -> bool:
        """
        Set allowance(caller, spender) to exactly `amount`.

        This overwrites, it does not add. Moving a non-zero allowance to a
        different non-zero value lets the spender race the change and spend
        both; callers that care should approve 0 first.
        """
        with self._lock:
            try:
                amount = _u256(amount)
                if is_null(caller):
                    raise InvalidSender("Approve from the zero address")
                if is_null(spender):
                    raise InvalidSpender("Approve to the zero address")
            except LedgerError as e:
                self._rejected("approve", caller, e)
                raise

            self._allowances[(caller, spender)] = amount
            self.events.record(APPROVAL, amount, owner=caller, spender=spender)
        self.events.flush()
        return True

    def transfer_from(self, caller: str, owner: str, recipient: str, amount: int) -> bool:
        with self._lock:
            try:
                amount = _u256(amount)
                if is_null(owner):
                    raise InvalidSender("Transfer from the zero address")
                if is_null(recipient):
                    raise InvalidRecipient("Transfer to the zero address")
                if self._balances.get(owner, 0) < amount:
                    raise InsufficientBalance("Insufficient balance")
                remaining = self._allowances.get((owner, caller), 0)
                if remaining < amount:
                    raise AllowanceExceeded("Allowance exceeded")
            except LedgerError as e:
                self._rejected("transfer_from", caller, e)
                raise

            self._move(owner, recipient, amount)
            self._allowances[(owner, caller)] = remaining - amount
            self.events.record(TRANSFER, amount, **{"from": owner, "to": recipient})
        self.events.flush()
        return True

    def mint(self, caller: str, account: str, amount: int) -> None:
        with self._lock:
            try:
                self._require_issuer(caller)
                amount = _u256(amount)
                if is_null(account):
                    raise InvalidAccount("Mint to the zero address")
                if self._total_supply + amount > UINT256_MAX:
                    raise SupplyOverflow("Total supply would exceed uint256")
            except LedgerError as e:
                self._rejected("mint", caller, e)
                raise

            self._total_supply += amount
            self._balances[account] = self._balances.get(account, 0) + amount
            self.events.record(TRANSFER, amount, **{"from": NULL_ADDRESS, "to": account})
        self.events.flush()

    def burn(self, caller: str, account: str, amount: int) -> None:
        with self._lock:
            try:
                self._require_issuer(caller)
                amount = _u256(amount)
                if is_null(account):
                    raise InvalidAccount("Burn from the zero address")
                if self._balances.get(account, 0) < amount:
                    raise InsufficientBalance("Insufficient balance to burn")
            except LedgerError as e:
                self._rejected("burn", caller, e)
                raise

            self._total_supply -= amount
            self._balances[account] = self._balances.get(account, 0) - amount
            self.events.record(TRANSFER, amount, **{"from": account, "to": NULL_ADDRESS})
        self.events.flush()

    # ------------------------------------------------------------------ #
    # Internals (lock already held)
    # ------------------------------------------------------------------ #
    def _require_issuer(self, caller: Optional[str]) -> None:
        if not self.is_issuer(caller):
            raise Unauthorized("Not the owner")

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        # debit first: for sender == recipient the credit must see the debited value
        self._balances[sender] = self._balances.get(sender, 0) - amount
        self._balances[recipient] = self._balances.get(recipient, 0) + amount

    def _rejected(self, op: str, caller: Optional[str], err: LedgerError) -> None:
        log(f"Rejected {op} by {caller}: {type(err).__name__}: {err}")
