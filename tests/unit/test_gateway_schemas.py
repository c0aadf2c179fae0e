"""Unit tests for rs_gateway Pydantic schemas."""

import pytest
from pydantic import ValidationError

from src.rs_gateway.user.schemas import AdminInfo, CreateAdminRequest, LoginResponse


class TestCreateAdminRequest:
    def test_valid_input(self) -> None:
        req = CreateAdminRequest(username="ops.admin", email="ops@example.com", password="SecureP4ssword")
        assert req.username == "ops.admin"

    def test_username_too_short(self) -> None:
        with pytest.raises(ValidationError):
            CreateAdminRequest(username="ab", email="a@b.com", password="SecureP4ssword")

    def test_username_invalid_chars(self) -> None:
        with pytest.raises(ValidationError):
            CreateAdminRequest(username="ops admin!", email="a@b.com", password="SecureP4ssword")

    def test_invalid_email(self) -> None:
        with pytest.raises(ValidationError):
            CreateAdminRequest(username="admin", email="not-an-email", password="SecureP4ssword")

    def test_password_too_short(self) -> None:
        with pytest.raises(ValidationError):
            CreateAdminRequest(username="admin", email="a@b.com", password="Short1A")

    @pytest.mark.parametrize("password", ["alllowercase1", "ALLUPPERCASE1", "NoDigitsHereAtAll"])
    def test_password_complexity(self, password: str) -> None:
        with pytest.raises(ValidationError):
            CreateAdminRequest(username="admin", email="a@b.com", password=password)


class TestLoginResponse:
    def test_default_token_type(self) -> None:
        resp = LoginResponse(
            access_token="a",
            refresh_token="r",
            expires_in=900,
            admin=AdminInfo(admin_id="1", username="admin", email="a@b.com"),
        )
        assert resp.token_type == "Bearer"
