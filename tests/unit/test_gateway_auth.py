"""Unit tests for JWT handling and the auth dependencies."""

from unittest.mock import patch

import pytest
from fastapi import HTTPException
from jose import jwt

from config.settings import settings
from src.tm_common.errors import InvalidCredentialsError, InvalidEventTokenError
from src.tm_gateway.auth.dependencies import get_current_user_id, verify_event_token
from src.tm_gateway.auth.jwt_handler import create_access_token, decode_access_token


def test_access_token_contains_correct_claims() -> None:
    payload = jwt.get_unverified_claims(create_access_token("user-123"))
    assert payload["sub"] == "user-123"
    assert payload["type"] == "access"


def test_decode_valid_access_token() -> None:
    assert decode_access_token(create_access_token("user-abc"))["sub"] == "user-abc"


def test_wrong_signature_rejected() -> None:
    token = jwt.encode({"sub": "x", "type": "access"}, "other-secret", algorithm="HS256")
    with pytest.raises(InvalidCredentialsError):
        decode_access_token(token)


def test_wrong_token_type_rejected() -> None:
    token = jwt.encode({"sub": "x", "type": "refresh"}, settings.JWT_SECRET, algorithm="HS256")
    with pytest.raises(InvalidCredentialsError):
        decode_access_token(token)


def test_garbage_rejected() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_access_token("not-a-jwt")


class TestGetCurrentUserId:
    async def test_valid_token(self) -> None:
        assert await get_current_user_id(create_access_token("u-9")) == "u-9"

    async def test_missing_token(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user_id(None)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "unauthenticated"

    async def test_invalid_token(self) -> None:
        with pytest.raises(HTTPException):
            await get_current_user_id("bogus")


class TestVerifyEventToken:
    async def test_open_when_no_secret_configured(self) -> None:
        with patch.object(settings, "EVENTS_SHARED_SECRET", None):
            await verify_event_token(None)

    async def test_matching_token_accepted(self) -> None:
        with patch.object(settings, "EVENTS_SHARED_SECRET", "s3cret"):
            await verify_event_token("s3cret")

    @pytest.mark.parametrize("token", [None, "wrong", "s3cr\u00e9t"])
    async def test_bad_token_rejected(self, token: str | None) -> None:
        with patch.object(settings, "EVENTS_SHARED_SECRET", "s3cret"):
            with pytest.raises(InvalidEventTokenError):
                await verify_event_token(token)
