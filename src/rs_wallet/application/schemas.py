"""Pydantic schemas and cursor utilities for the wallet API."""

import base64
import json

from pydantic import BaseModel, Field, field_validator

from src.rs_common.enums import AdjustmentType
from src.rs_common.money import format_amount
from src.rs_wallet.domain.models import LedgerEntry, PostingResult, Wallet

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_id: int) -> str:
    """Encode a ledger entry id into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.urlsafe_b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode a cursor back to the last seen id. Garbage restarts from the top."""
    if not cursor:
        return None
    try:
        payload = json.loads(base64.urlsafe_b64decode(cursor.encode()).decode())
        return int(payload["id"])
    except (ValueError, KeyError, TypeError):
        return None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class AdjustRequest(BaseModel):
    amount: int = Field(..., gt=0, description="Magnitude in the smallest currency unit; type gives the sign")
    type: AdjustmentType
    reason: str = Field(..., min_length=1, max_length=500)

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("reason must not be blank")
        return v.strip()


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class WalletBalanceResponse(BaseModel):
    wallet_id: int
    driver_id: int
    balance: int
    currency: str
    has_debt: bool
    debt_amount: int
    balance_display: str
    version: int

    @classmethod
    def from_wallet(cls, wallet: Wallet) -> "WalletBalanceResponse":
        debt = wallet.debt
        return cls(
            wallet_id=wallet.id,
            driver_id=wallet.driver_id,
            balance=wallet.balance,
            currency=wallet.currency,
            has_debt=debt.has_debt,
            debt_amount=debt.debt_amount,
            balance_display=format_amount(wallet.balance, wallet.currency),
            version=wallet.version,
        )


class LedgerEntryItem(BaseModel):
    id: int
    entry_type: str
    amount: int
    balance_after: int
    reason: str
    actor: str
    reference_id: str | None
    created_at: str

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> "LedgerEntryItem":
        return cls(
            id=entry.id,
            entry_type=entry.entry_type,
            amount=entry.amount,
            balance_after=entry.balance_after,
            reason=entry.reason,
            actor=entry.actor,
            reference_id=entry.reference_id,
            created_at=entry.created_at.isoformat() if entry.created_at else "",
        )


class PostingResponse(BaseModel):
    wallet: WalletBalanceResponse
    entry: LedgerEntryItem
    replayed: bool

    @classmethod
    def from_result(cls, result: PostingResult) -> "PostingResponse":
        return cls(
            wallet=WalletBalanceResponse.from_wallet(result.wallet),
            entry=LedgerEntryItem.from_entry(result.entry),
            replayed=result.replayed,
        )


class LedgerResponse(BaseModel):
    items: list[LedgerEntryItem]
    next_cursor: str | None
    has_more: bool


class VerifyResponse(BaseModel):
    wallet_id: int
    stored_balance: int
    ledger_sum: int
    entry_count: int
    consistent: bool
