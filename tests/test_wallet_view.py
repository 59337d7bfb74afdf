from __future__ import annotations

import pytest

from ledger.ledger_errors import InvalidAmount
from ledger.token_ledger import UINT256_MAX
from ledger.wallet_view import format_units, parse_units, snapshot, summarize_balances_md

from .conftest import ALICE, BOB, ISSUER, ONE


@pytest.mark.parametrize(
    "amount, expected",
    [
        (0, "0"),
        (1, "0.000000000000000001"),
        (ONE, "1"),
        (1_500000000000000000, "1.5"),
        (1000 * ONE, "1000"),
    ],
)
def test_format_units(amount, expected):
    assert format_units(amount) == expected


def test_format_units_custom_decimals():
    assert format_units(12345, 2) == "123.45"
    assert format_units(12300, 2) == "123"


@pytest.mark.parametrize(
    "text, expected",
    [("1", ONE), ("1.5", 1_500000000000000000), ("0.000000000000000001", 1), (" 2 ", 2 * ONE)],
)
def test_parse_units(text, expected):
    assert parse_units(text) == expected


def test_parse_units_keeps_full_precision():
    text = format_units(UINT256_MAX)
    assert parse_units(text) == UINT256_MAX


@pytest.mark.parametrize(
    "bad",
    ["-1", "abc", "0.0000000000000000001", "NaN", "Infinity", "1." + "0" * 99 + "1"],
)
def test_parse_units_rejects(bad):
    with pytest.raises(InvalidAmount):
        parse_units(bad)


def test_snapshot_and_markdown(funded):
    snap = snapshot(funded)
    assert snap.symbol == "SANTA"
    assert snap.total_supply == 1000 * ONE
    assert snap.balances == {ISSUER: 850 * ONE, ALICE: 100 * ONE, BOB: 50 * ONE}

    lines = summarize_balances_md(snap)
    assert lines[0] == "### Balances in SANTA"
    holder_lines = [l for l in lines if l.startswith("- **")]
    assert holder_lines == [
        f"- **{ISSUER}**: 850 SANTA",
        f"- **{ALICE}**: 100 SANTA",
        f"- **{BOB}**: 50 SANTA",
    ]


def test_markdown_for_empty_ledger(token):
    token.burn(ISSUER, ISSUER, token.total_supply)
    lines = summarize_balances_md(snapshot(token))
    assert "_No accounts hold a balance._" in lines
