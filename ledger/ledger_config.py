"""
Ledger configuration

Construction-time settings for the token: display name, symbol, initial
supply (whole tokens, before decimal scaling) and the issuer address.

Sources, later ones win:
- built-in defaults
- YAML file (explicit path, or LEDGER_CONFIG env var); keys may sit at the
  top level or under a `token:` section
- env vars TOKEN_NAME, TOKEN_SYMBOL, TOKEN_INITIAL_SUPPLY, TOKEN_ISSUER
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ledger.ledger_errors import ConfigError
from ledger.token_ledger import NULL_ADDRESS

DEFAULT_NAME = "ThiisSantaToken"
DEFAULT_SYMBOL = "SANTA"
DEFAULT_INITIAL_SUPPLY = 1_000_000

ENV_KEYS = {
    "name": "TOKEN_NAME",
    "symbol": "TOKEN_SYMBOL",
    "initial_supply": "TOKEN_INITIAL_SUPPLY",
    "issuer": "TOKEN_ISSUER",
}


@dataclass
class LedgerConfig:
    name: str
    symbol: str
    initial_supply: int
    issuer: str


def load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Ledger config not found at {path}")
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Ledger config {path} must be a mapping")
    section = data.get("token", data)
    if not isinstance(section, dict):
        raise ConfigError(f"'token' section in {path} must be a mapping")
    return section


def _parse_supply(raw: Any) -> int:
    if isinstance(raw, bool):
        raise ConfigError(f"initial_supply must be an integer, got {raw!r}")
    try:
        value = int(str(raw).strip().replace("_", ""))
    except ValueError:
        raise ConfigError(f"initial_supply must be an integer, got {raw!r}") from None
    if value < 0:
        raise ConfigError(f"initial_supply must be >= 0, got {value}")
    return value


def load_config(path: Optional[Union[str, Path]] = None) -> LedgerConfig:
    values: Dict[str, Any] = {
        "name": DEFAULT_NAME,
        "symbol": DEFAULT_SYMBOL,
        "initial_supply": DEFAULT_INITIAL_SUPPLY,
        "issuer": None,
    }

    cfg_path = path or os.getenv("LEDGER_CONFIG", "").strip() or None
    if cfg_path:
        file_values = load_yaml(Path(cfg_path))
        values.update({k: v for k, v in file_values.items() if k in values})

    for key, env_name in ENV_KEYS.items():
        env_val = os.getenv(env_name)
        if env_val is not None and env_val.strip():
            values[key] = env_val.strip()

    issuer = values["issuer"]
    if not issuer or issuer == NULL_ADDRESS:
        raise ConfigError("No issuer configured (set TOKEN_ISSUER or `issuer` in the config file)")
    if not isinstance(issuer, str):
        # unquoted 0x... in YAML loads as an int
        raise ConfigError(f"issuer must be a string, got {issuer!r}; quote it in YAML")

    return LedgerConfig(
        name=str(values["name"]),
        symbol=str(values["symbol"]),
        initial_supply=_parse_supply(values["initial_supply"]),
        issuer=str(issuer),
    )
