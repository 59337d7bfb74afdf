from __future__ import annotations

import pytest

from ledger.token_ledger import TokenLedger

ISSUER = "0x1111111111111111111111111111111111111111"
ALICE = "0xA11CE00000000000000000000000000000000001"
BOB = "0xB0B0000000000000000000000000000000000002"
CAROL = "0xCA40100000000000000000000000000000000003"

ONE = 10 ** 18


@pytest.fixture
def token() -> TokenLedger:
    """Fresh ledger: 1000 whole tokens credited to ISSUER."""
    return TokenLedger("ThiisSantaToken", "SANTA", 1000, ISSUER)


@pytest.fixture
def funded(token: TokenLedger) -> TokenLedger:
    """Ledger where ALICE holds 100 tokens and BOB holds 50."""
    token.transfer(ISSUER, ALICE, 100 * ONE)
    token.transfer(ISSUER, BOB, 50 * ONE)
    return token
