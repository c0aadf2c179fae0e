"""Tests for rs_common.errors, rs_common.db_errors and rs_common.response."""

import pytest
from sqlalchemy.exc import DBAPIError

from src.rs_common.db_errors import sqlstate_of, translate_db_error
from src.rs_common.errors import (
    AppError,
    BlockReasonRequiredError,
    ConflictError,
    DebtLimitExceededError,
    DriverNotFoundError,
    InvalidAmountError,
    InvalidInputError,
    InvalidModerationTransitionError,
    PersistenceUnavailableError,
    WalletNotFoundError,
)
from src.rs_common.response import ApiResponse, error_response, success_response


class _PgError(Exception):
    def __init__(self, sqlstate: str | None) -> None:
        super().__init__(f"sqlstate {sqlstate}")
        self.sqlstate = sqlstate


def _dbapi_error(sqlstate: str | None) -> DBAPIError:
    return DBAPIError("UPDATE wallets ...", {}, _PgError(sqlstate))


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_custom_http_status(self) -> None:
        err = AppError(code=1001, message="Username taken", http_status=409)
        assert err.http_status == 409

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1001, message="test"), Exception)


class TestSpecificErrors:
    def test_invalid_amount(self) -> None:
        err = InvalidAmountError("amount must not be zero")
        assert err.code == 2001
        assert err.http_status == 422
        assert "must not be zero" in err.message

    def test_wallet_not_found(self) -> None:
        err = WalletNotFoundError(42)
        assert err.code == 2002
        assert err.http_status == 404

    def test_debt_limit_message(self) -> None:
        err = DebtLimitExceededError(balance=-9000, amount=-2000, limit=10000)
        assert err.code == 2003
        assert "2000" in err.message
        assert "-10000" in err.message

    def test_conflict_is_retryable_409(self) -> None:
        err = ConflictError()
        assert err.code == 2004
        assert err.http_status == 409

    def test_invalid_input(self) -> None:
        assert InvalidInputError("x").code == 3001

    def test_driver_errors(self) -> None:
        assert DriverNotFoundError(1).http_status == 404
        assert BlockReasonRequiredError().code == 4002

    def test_moderation_transition(self) -> None:
        err = InvalidModerationTransitionError("suspend", "banned")
        assert err.code == 5002
        assert err.message == "Cannot suspend a subject that is banned"

    def test_persistence_unavailable(self) -> None:
        err = PersistenceUnavailableError()
        assert err.code == 9003
        assert err.http_status == 503


class TestTranslateDbError:
    @pytest.mark.parametrize("sqlstate", ["55P03", "40001", "40P01"])
    def test_contention_becomes_conflict(self, sqlstate: str) -> None:
        assert isinstance(translate_db_error(_dbapi_error(sqlstate)), ConflictError)

    def test_other_sqlstate_is_unavailable(self) -> None:
        assert isinstance(translate_db_error(_dbapi_error("08006")), PersistenceUnavailableError)

    def test_connection_refused(self) -> None:
        err = translate_db_error(ConnectionRefusedError("connection refused"))
        assert isinstance(err, PersistenceUnavailableError)

    def test_sqlstate_of(self) -> None:
        assert sqlstate_of(_dbapi_error("55P03")) == "55P03"
        assert sqlstate_of(OSError("boom")) is None


class TestApiResponse:
    def test_success(self) -> None:
        resp = success_response({"wallet_id": 1})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"wallet_id": 1}

    def test_error(self) -> None:
        resp = error_response(2003, "Debt limit exceeded")
        assert resp.code == 2003
        assert resp.data is None

    def test_request_id_is_carried(self) -> None:
        assert success_response(None, "req_abc").request_id == "req_abc"

    def test_serialization(self) -> None:
        d = ApiResponse().model_dump()
        for key in ("code", "message", "data", "timestamp", "request_id"):
            assert key in d
