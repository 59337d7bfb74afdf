from __future__ import annotations

from ledger.ledger_integrity import analyze_ledger, check_invariants, render_report, replay_events, write_report
from ledger.token_ledger import NULL_ADDRESS

from .conftest import ALICE, BOB, CAROL, ISSUER, ONE


def _busy(token):
    token.transfer(ISSUER, ALICE, 100 * ONE)
    token.approve(ALICE, BOB, 60 * ONE)
    token.transfer_from(BOB, ALICE, CAROL, 60 * ONE)
    token.mint(ISSUER, BOB, 5 * ONE)
    token.burn(ISSUER, CAROL, 10 * ONE)
    return token


def test_clean_ledger_has_no_problems(token):
    _busy(token)
    assert check_invariants(token) == []
    result = analyze_ledger(token)
    assert result["ok"] is True
    assert result["summary"]["replay_mismatches"] == 0
    assert result["summary"]["transfer_events"] == 6  # creation credit included


def test_replay_matches_live_state(token):
    _busy(token)
    balances, supply = replay_events(token.events.all_events())
    assert supply == token.total_supply
    assert balances == token.balances()


def test_replay_ignores_approvals(token):
    token.approve(ISSUER, ALICE, 10 ** 20)
    balances, supply = replay_events(token.events.all_events())
    assert balances == {ISSUER: 1000 * ONE}
    assert supply == 1000 * ONE


def test_detects_tampered_balance(token):
    _busy(token)
    token._balances[ALICE] += 1  # bypass the ledger on purpose
    problems = check_invariants(token)
    assert any("sum of balances" in p for p in problems)

    result = analyze_ledger(token)
    assert result["ok"] is False
    assert any(ALICE in m for m in result["mismatches"])


def test_detects_null_address_balance(token):
    token._balances[ISSUER] -= 3
    token._balances[NULL_ADDRESS] = 3
    problems = check_invariants(token)
    assert any("null address" in p for p in problems)


def test_report_rendering_and_write(token, tmp_path):
    _busy(token)
    result = analyze_ledger(token)
    text = render_report(result)
    assert text.startswith("# SANTA Ledger Integrity Report")
    assert "- No integrity issues detected" in text
    assert "995 SANTA" in text

    out = write_report(result, tmp_path / "reports")
    assert out.name.startswith("ledger_integrity_")
    assert out.read_text(encoding="utf-8") == text


def test_report_lists_issues(token):
    token._total_supply += 1
    text = render_report(analyze_ledger(token))
    assert "- sum of balances" in text
    assert "- replayed supply" in text
