"""Domain models for rs_driver — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime

from src.rs_wallet.domain.models import DebtStatus


@dataclass
class Driver:
    id: int
    name: str
    phone: str | None = None
    email: str | None = None
    license_plate: str | None = None
    vehicle_make: str | None = None
    vehicle_model: str | None = None
    block_causes: list[str] = field(default_factory=list)   # unexpired causes only

    @property
    def is_blocked(self) -> bool:
        return bool(self.block_causes)


@dataclass
class DriverBlock:
    driver_id: int
    cause: str                       # BlockCause value
    reason: str
    actor: str
    created_at: datetime | None = None
    expires_at: datetime | None = None   # None = until lifted


@dataclass
class DriverDebtRow:
    """One row of the debts screen: driver, vehicle and wallet side by side."""

    driver: Driver
    wallet_id: int | None
    balance: int
    currency: str

    @property
    def debt(self) -> DebtStatus:
        return DebtStatus.from_balance(self.balance)
