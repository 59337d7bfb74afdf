"""
Token Ledger Integrity Guardian

- Checks the live ledger state:
    * sum of balances equals total supply
    * no negative balances or allowances
    * the null address holds nothing
- Replays the Transfer events from the event log and compares the
  recomputed balances / supply with the live state
- Emits a human-readable report:
    <out_dir>/ledger_integrity_YYYY-MM-DD.md

This is read-only: it never mutates the ledger, only reports.
"""

from __future__ import annotations
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

from ledger.event_log import TRANSFER, LedgerEvent
from ledger.token_ledger import NULL_ADDRESS, TokenLedger
from ledger.wallet_view import format_units


def check_invariants(ledger: TokenLedger) -> List[str]:
    return _check_state(ledger.state())


def _check_state(state: Dict[str, Any]) -> List[str]:
    problems: List[str] = []
    balances = state["balances"]
    total = state["total_supply"]

    held = sum(balances.values())
    if held != total:
        problems.append(f"sum of balances {held} != total supply {total}")
    for acct, amt in sorted(balances.items()):
        if amt < 0:
            problems.append(f"negative balance for `{acct}`: {amt}")
    if balances.get(NULL_ADDRESS):
        problems.append(f"null address holds {balances[NULL_ADDRESS]}")
    for (owner, spender), amt in sorted(state["allowances"].items()):
        if amt < 0:
            problems.append(f"negative allowance `{owner}` -> `{spender}`: {amt}")
    return problems


def replay_events(events: Iterable[LedgerEvent]) -> Tuple[Dict[str, int], int]:
    """
    Rebuild balances and total supply from Transfer events alone.
    A Transfer from the null address is issuance, one to it is destruction.
    """
    balances: Dict[str, int] = {}
    supply = 0
    for ev in events:
        if ev.event_type != TRANSFER:
            continue
        src = ev.indexed.get("from", NULL_ADDRESS)
        dst = ev.indexed.get("to", NULL_ADDRESS)
        if src == NULL_ADDRESS:
            supply += ev.amount
        else:
            balances[src] = balances.get(src, 0) - ev.amount
        if dst == NULL_ADDRESS:
            supply -= ev.amount
        else:
            balances[dst] = balances.get(dst, 0) + ev.amount
    return {acct: amt for acct, amt in balances.items() if amt}, supply


def analyze_ledger(ledger: TokenLedger) -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    state = ledger.state()
    events = state["events"]
    live = state["balances"]
    total = state["total_supply"]

    replayed, replayed_supply = replay_events(events)
    mismatches: List[str] = []
    if replayed_supply != total:
        mismatches.append(f"replayed supply {replayed_supply} != live supply {total}")
    for acct in sorted(set(live) | set(replayed)):
        if live.get(acct, 0) != replayed.get(acct, 0):
            mismatches.append(
                f"`{acct}`: live {live.get(acct, 0)} != replayed {replayed.get(acct, 0)}"
            )

    problems = _check_state(state)
    summary = {
        "events_scanned": len(events),
        "transfer_events": sum(1 for e in events if e.event_type == TRANSFER),
        "accounts_with_balance": len(live),
        "invariant_violations": len(problems),
        "replay_mismatches": len(mismatches),
    }

    return {
        "ok": not problems and not mismatches,
        "symbol": ledger.symbol,
        "decimals": ledger.decimals,
        "total_supply": total,
        "summary": summary,
        "problems": problems,
        "mismatches": mismatches,
        "generated_at": now.isoformat(),
    }


def render_report(result: Dict[str, Any]) -> str:
    s = result["summary"]
    lines: List[str] = []

    lines.append(f"# {result['symbol']} Ledger Integrity Report")
    lines.append("")
    lines.append(f"- Generated at: `{result['generated_at']}`")
    lines.append(
        f"- Total supply: `{format_units(result['total_supply'], result['decimals'])} {result['symbol']}`"
    )
    lines.append("")
    lines.append("## Summary")
    lines.append(f"- Events scanned: **{s['events_scanned']}**")
    lines.append(f"- Transfer events: **{s['transfer_events']}**")
    lines.append(f"- Accounts with a balance: **{s['accounts_with_balance']}**")
    lines.append(f"- Invariant violations: **{s['invariant_violations']}**")
    lines.append(f"- Replay mismatches: **{s['replay_mismatches']}**")
    lines.append("")

    lines.append("## Detected Issues")
    issues = result["problems"] + result["mismatches"]
    if issues:
        lines.extend(f"- {i}" for i in issues)
    else:
        lines.append("- No integrity issues detected")
    lines.append("")
    return "\n".join(lines)


def write_report(result: Dict[str, Any], out_dir: Path) -> Path:
    out_dir.mkdir(parents=True, exist_ok=True)
    today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    out = out_dir / f"ledger_integrity_{today}.md"
    out.write_text(render_report(result), encoding="utf-8")
    return out
