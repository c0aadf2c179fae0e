"""Pydantic schemas for the drivers / debts API."""

import math

from pydantic import BaseModel, Field

from src.rs_driver.domain.models import DriverDebtRow

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BlockRequest(BaseModel):
    # Blank reasons are rejected by the service with BlockReasonRequiredError
    reason: str = Field("", max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class DriverDebtItem(BaseModel):
    id: int
    name: str
    phone: str | None
    email: str | None
    is_blocked: bool
    block_causes: list[str]
    wallet_id: int | None
    balance: int
    currency: str
    has_debt: bool
    debt_amount: int
    license_plate: str | None
    vehicle_make: str | None
    vehicle_model: str | None

    @classmethod
    def from_row(cls, row: DriverDebtRow) -> "DriverDebtItem":
        driver, debt = row.driver, row.debt
        return cls(
            id=driver.id,
            name=driver.name,
            phone=driver.phone,
            email=driver.email,
            is_blocked=driver.is_blocked,
            block_causes=driver.block_causes,
            wallet_id=row.wallet_id,
            balance=row.balance,
            currency=row.currency,
            has_debt=debt.has_debt,
            debt_amount=debt.debt_amount,
            license_plate=driver.license_plate,
            vehicle_make=driver.vehicle_make,
            vehicle_model=driver.vehicle_model,
        )


class DriverDebtsPage(BaseModel):
    data: list[DriverDebtItem]
    current_page: int
    last_page: int
    per_page: int
    total: int

    @staticmethod
    def last_page_for(total: int, per_page: int) -> int:
        return max(1, math.ceil(total / per_page))


class BlockStatusResponse(BaseModel):
    driver_id: int
    is_blocked: bool
    block_causes: list[str]
    changed: bool
