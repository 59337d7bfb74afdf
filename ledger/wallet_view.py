"""
Wallet View

Human-facing rendering of ledger balances:
- scale base-unit integers by `decimals` for display (and parse them back)
- take a point-in-time snapshot of all non-zero balances
- render that snapshot as markdown lines
"""

from __future__ import annotations
import datetime as _dt
from dataclasses import dataclass, field
from decimal import Decimal, Inexact, InvalidOperation, localcontext
from typing import Dict, List

from ledger.ledger_errors import InvalidAmount
from ledger.token_ledger import DECIMALS, TokenLedger


def format_units(amount: int, decimals: int = DECIMALS) -> str:
    """
    Render a base-unit amount as a decimal string, e.g.
    format_units(1_500000000000000000) -> "1.5". Exact; no float rounding.
    """
    whole, frac = divmod(amount, 10 ** decimals)
    if not frac:
        return str(whole)
    frac_txt = str(frac).rjust(decimals, "0").rstrip("0")
    return f"{whole}.{frac_txt}"


def parse_units(text: str, decimals: int = DECIMALS) -> int:
    try:
        value = Decimal(str(text).strip())
    except InvalidOperation:
        raise InvalidAmount(f"Not a decimal amount: {text!r}") from None
    if not value.is_finite() or value < 0:
        raise InvalidAmount(f"Amount must be a non-negative number: {text!r}")
    with localcontext() as ctx:
        # wide enough for any uint256 amount; anything longer must not round
        ctx.prec = 100
        ctx.traps[Inexact] = True
        try:
            scaled = value.scaleb(decimals)
            exact = scaled == scaled.to_integral_value()
        except Inexact:
            raise InvalidAmount(f"Too many digits: {text!r}") from None
    if not exact:
        raise InvalidAmount(f"More than {decimals} fractional digits: {text!r}")
    return int(scaled)


@dataclass
class WalletSnapshot:
    symbol: str
    decimals: int
    total_supply: int
    balances: Dict[str, int] = field(default_factory=dict)
    taken_at: str = ""


def snapshot(ledger: TokenLedger) -> WalletSnapshot:
    state = ledger.state()
    return WalletSnapshot(
        symbol=ledger.symbol,
        decimals=ledger.decimals,
        total_supply=state["total_supply"],
        balances=state["balances"],
        taken_at=_dt.datetime.now(_dt.timezone.utc).isoformat(timespec="seconds"),
    )


def summarize_balances_md(snap: WalletSnapshot) -> List[str]:
    lines: List[str] = [f"### Balances in {snap.symbol}", ""]
    lines.append(f"- Snapshot taken: `{snap.taken_at}`")
    lines.append(f"- Total supply: **{format_units(snap.total_supply, snap.decimals)} {snap.symbol}**")
    lines.append("")
    if not snap.balances:
        lines.append("_No accounts hold a balance._")
        lines.append("")
        return lines

    # largest holders first
    for acct, amt in sorted(snap.balances.items(), key=lambda kv: (-kv[1], kv[0])):
        lines.append(f"- **{acct}**: {format_units(amt, snap.decimals)} {snap.symbol}")
    lines.append("")
    return lines
