"""Unit tests for JWT handler."""

from datetime import timedelta
from unittest.mock import patch

import pytest
from jose import jwt

from config.settings import settings
from src.fx_common.enums import Role
from src.fx_common.errors import InvalidCredentialsError
from src.fx_gateway.auth.capabilities import Caller
from src.fx_gateway.auth.jwt_handler import (
    caller_from_claims,
    create_access_token,
    decode_token,
)

_CASHIER = Caller(user_id="user-123", name="Awa", role=Role.CASHIER, agency_id="AG-DLA")


def test_access_token_contains_caller_claims() -> None:
    token = create_access_token(_CASHIER)
    payload = jwt.get_unverified_claims(token)
    assert payload["sub"] == "user-123"
    assert payload["role"] == "cashier"
    assert payload["agency_id"] == "AG-DLA"
    assert payload["type"] == "access"


def test_round_trip_to_caller() -> None:
    caller = caller_from_claims(decode_token(create_access_token(_CASHIER)))
    assert caller == _CASHIER


def test_expired_access_token_raises_credentials_error() -> None:
    with patch(
        "src.fx_gateway.auth.jwt_handler._ACCESS_EXPIRE",
        timedelta(seconds=-1),
    ):
        token = create_access_token(_CASHIER)
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_tampered_token_raises_error() -> None:
    token = create_access_token(_CASHIER)
    tampered = token[:-4] + "xxxx"
    with pytest.raises(InvalidCredentialsError):
        decode_token(tampered)


def test_non_access_token_rejected() -> None:
    token = jwt.encode(
        {"sub": "user-123", "role": "cashier", "type": "refresh"},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_unknown_role_rejected() -> None:
    with pytest.raises(InvalidCredentialsError):
        caller_from_claims({"sub": "user-123", "role": "janitor"})


def test_missing_subject_rejected() -> None:
    with pytest.raises(InvalidCredentialsError):
        caller_from_claims({"role": "cashier"})


def test_name_defaults_to_subject() -> None:
    caller = caller_from_claims({"sub": "user-9", "role": "auditor", "agency_id": ""})
    assert caller.name == "user-9"
    assert caller.agency_id is None
