import os
import threading
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ledger.ledger_config import load_config
from ledger.ledger_errors import (
    AllowanceExceeded,
    ConfigError,
    InsufficientBalance,
    InvalidAddress,
    InvalidAmount,
    InvalidSender,
    LedgerError,
    SupplyOverflow,
    Unauthorized,
)
from ledger.ledger_integrity import analyze_ledger
from ledger.token_ledger import TokenLedger, is_null
from ledger.wallet_view import format_units

# ---------------------------
# Config
# ---------------------------
ENV_NAME = os.getenv("ENV_NAME", "prod")
ALLOW_ORIGINS = os.getenv("ALLOW_ORIGINS", "*")
MAX_EVENTS = 500

# ---------------------------
# Ledger instance (built from config on first use)
# ---------------------------
_ledger: Optional[TokenLedger] = None
_ledger_lock = threading.Lock()


def get_ledger() -> TokenLedger:
    global _ledger
    with _ledger_lock:
        if _ledger is None:
            _ledger = TokenLedger.from_config(load_config())
        return _ledger


def set_ledger(ledger: Optional[TokenLedger]) -> None:
    global _ledger
    with _ledger_lock:
        _ledger = ledger


def require_caller(x_caller: Optional[str]) -> str:
    if not x_caller or not x_caller.strip():
        raise HTTPException(status_code=401, detail="Missing X-Caller header.")
    caller = x_caller.strip()
    if is_null(caller):
        raise InvalidSender("Caller is the zero address")
    return caller


def _status_for(err: LedgerError) -> int:
    if isinstance(err, Unauthorized):
        return 403
    if isinstance(err, (InvalidAddress, InvalidAmount)):
        return 400
    if isinstance(err, (InsufficientBalance, AllowanceExceeded, SupplyOverflow)):
        return 409
    return 400


# ---------------------------
# Models
# ---------------------------
AMOUNT_PATTERN = r"^[0-9]{1,78}$"


class TransferBody(BaseModel):
    recipient: str
    amount: str = Field(pattern=AMOUNT_PATTERN, description="Base units, decimal string")


class ApproveBody(BaseModel):
    spender: str
    amount: str = Field(pattern=AMOUNT_PATTERN)


class TransferFromBody(BaseModel):
    owner: str
    recipient: str
    amount: str = Field(pattern=AMOUNT_PATTERN)


class SupplyBody(BaseModel):
    account: str
    amount: str = Field(pattern=AMOUNT_PATTERN)


# ---------------------------
# App
# ---------------------------
app = FastAPI(title="Santa-Token-Ledger", version="0.1.0", docs_url="/docs", openapi_url="/openapi.json")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in ALLOW_ORIGINS.split(",")] if ALLOW_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    return JSONResponse(
        status_code=_status_for(exc),
        content={"ok": False, "error": type(exc).__name__, "detail": str(exc)},
    )


@app.exception_handler(ConfigError)
async def config_error_handler(request: Request, exc: ConfigError):
    print(f"[API] ledger not configured: {exc}", flush=True)
    return JSONResponse(
        status_code=503,
        content={"ok": False, "error": "ConfigError", "detail": str(exc)},
    )


# ---------------------------
# Health / Status
# ---------------------------
@app.get("/v1/ops/health")
def health():
    ledger = get_ledger()
    return {"ok": True, "env": ENV_NAME, "symbol": ledger.symbol}


@app.get("/v1/ops/integrity")
def integrity():
    result = analyze_ledger(get_ledger())
    result["total_supply"] = str(result["total_supply"])
    return result


# ---------------------------
# Reads
# ---------------------------
@app.get("/v1/token")
def token_metadata():
    meta = get_ledger().metadata()
    meta["total_supply"] = str(meta["total_supply"])
    return {"ok": True, **meta}


@app.get("/v1/token/balance/{account}")
def balance_of(account: str):
    ledger = get_ledger()
    amount = ledger.balance_of(account)
    return {
        "ok": True,
        "account": account,
        "balance": str(amount),
        "display": format_units(amount, ledger.decimals),
    }


@app.get("/v1/token/allowance/{owner}/{spender}")
def allowance(owner: str, spender: str):
    amount = get_ledger().allowance(owner, spender)
    return {"ok": True, "owner": owner, "spender": spender, "allowance": str(amount)}


@app.get("/v1/token/events")
def events(event_type: Optional[str] = None, address: Optional[str] = None, limit: int = 100):
    limit = max(1, min(limit, MAX_EVENTS))
    items: List[Dict[str, Any]] = [
        ev.to_dict() for ev in get_ledger().events.filter(event_type=event_type, address=address)
    ]
    # newest first
    return {"ok": True, "items": items[::-1][:limit]}


# ---------------------------
# Mutations (caller = X-Caller header)
# ---------------------------
@app.post("/v1/token/transfer")
def transfer(body: TransferBody, x_caller: Optional[str] = Header(None)):
    caller = require_caller(x_caller)
    ok = get_ledger().transfer(caller, body.recipient, int(body.amount))
    return {"ok": ok}


@app.post("/v1/token/approve")
def approve(body: ApproveBody, x_caller: Optional[str] = Header(None)):
    caller = require_caller(x_caller)
    ok = get_ledger().approve(caller, body.spender, int(body.amount))
    return {"ok": ok}


@app.post("/v1/token/transfer_from")
def transfer_from(body: TransferFromBody, x_caller: Optional[str] = Header(None)):
    caller = require_caller(x_caller)
    ok = get_ledger().transfer_from(caller, body.owner, body.recipient, int(body.amount))
    return {"ok": ok}


@app.post("/v1/token/mint")
def mint(body: SupplyBody, x_caller: Optional[str] = Header(None)):
    caller = require_caller(x_caller)
    get_ledger().mint(caller, body.account, int(body.amount))
    return {"ok": True}


@app.post("/v1/token/burn")
def burn(body: SupplyBody, x_caller: Optional[str] = Header(None)):
    caller = require_caller(x_caller)
    get_ledger().burn(caller, body.account, int(body.amount))
    return {"ok": True}
