"""Unit tests for wallet schemas and the ledger cursor."""

import pytest
from pydantic import ValidationError

from src.rs_common.enums import AdjustmentType
from src.rs_wallet.application.schemas import (
    AdjustRequest,
    WalletBalanceResponse,
    cursor_decode,
    cursor_encode,
)
from src.rs_wallet.domain.models import DebtStatus, Wallet


class TestCursor:
    def test_decode_encoded(self) -> None:
        assert cursor_decode(cursor_encode(12345)) == 12345

    @pytest.mark.parametrize("cursor", [None, "", "not-base64!!", "eyJ4IjogMX0="])
    def test_garbage_restarts_from_top(self, cursor: str | None) -> None:
        assert cursor_decode(cursor) is None


class TestAdjustRequest:
    def test_valid(self) -> None:
        body = AdjustRequest(amount=5000, type="debit", reason=" Damage fee ")
        assert body.type is AdjustmentType.DEBIT
        assert body.reason == "Damage fee"

    def test_blank_reason_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AdjustRequest(amount=5000, type="debit", reason="   ")

    @pytest.mark.parametrize("amount", [0, -100])
    def test_amount_must_be_positive(self, amount: int) -> None:
        with pytest.raises(ValidationError):
            AdjustRequest(amount=amount, type="credit", reason="x")

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AdjustRequest(amount=100, type="refund", reason="x")


class TestDebtStatus:
    @pytest.mark.parametrize(
        ("balance", "has_debt", "debt_amount"),
        [(-2000, True, 2000), (0, False, 0), (1500, False, 0)],
    )
    def test_from_balance(self, balance: int, has_debt: bool, debt_amount: int) -> None:
        status = DebtStatus.from_balance(balance)
        assert (status.has_debt, status.debt_amount) == (has_debt, debt_amount)

    def test_balance_response(self) -> None:
        wallet = Wallet(id=3, driver_id=9, balance=-15000, currency="XOF", version=4)
        resp = WalletBalanceResponse.from_wallet(wallet)
        assert resp.has_debt is True
        assert resp.debt_amount == 15000
        assert resp.balance_display == "-15 000 XOF"
