"""Domain models for rs_wallet — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class DebtStatus:
    """Derived from a balance on every read, never stored."""

    has_debt: bool
    debt_amount: int

    @classmethod
    def from_balance(cls, balance: int) -> "DebtStatus":
        return cls(has_debt=balance < 0, debt_amount=max(0, -balance))


@dataclass
class Wallet:
    id: int
    driver_id: int
    balance: int             # smallest currency unit, negative = debt
    currency: str
    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def debt(self) -> DebtStatus:
        return DebtStatus.from_balance(self.balance)


@dataclass
class LedgerEntry:
    id: int                          # BIGSERIAL
    wallet_id: int
    entry_type: str                  # LedgerEntryType value
    amount: int                      # positive = credit, negative = debit, never 0
    balance_after: int               # wallet balance right after this entry
    reason: str
    actor: str                       # admin username, or "system"
    reference_id: str | None = None
    idempotency_key: str | None = None
    created_at: datetime | None = None


@dataclass
class PostingResult:
    wallet: Wallet
    entry: LedgerEntry
    replayed: bool = False           # True when an idempotency key matched an earlier posting
