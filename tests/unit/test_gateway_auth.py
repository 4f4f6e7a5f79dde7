"""Unit tests for JWT handling and the caller-identity dependency."""

from datetime import timedelta

import pytest
from fastapi import HTTPException
from jose import jwt

from config.settings import settings
from src.pm_common.errors import InvalidCredentialsError
from src.pm_gateway.auth.dependencies import get_caller_identity
from src.pm_gateway.auth.jwt_handler import create_access_token, decode_token


def test_access_token_contains_correct_claims() -> None:
    token = create_access_token("alice")
    payload = jwt.get_unverified_claims(token)
    assert payload["sub"] == "alice"
    assert payload["type"] == "access"


def test_decode_valid_access_token() -> None:
    assert decode_token(create_access_token("alice"))["sub"] == "alice"


def test_expired_token_rejected() -> None:
    token = create_access_token("alice", expires_in=timedelta(seconds=-1))
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_wrong_secret_rejected() -> None:
    token = jwt.encode({"sub": "alice", "type": "access"}, "other-secret", algorithm="HS256")
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_non_access_token_rejected() -> None:
    token = jwt.encode(
        {"sub": "alice", "type": "refresh"}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM
    )
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


@pytest.mark.asyncio
async def test_caller_identity_from_sub() -> None:
    assert await get_caller_identity(create_access_token("bob")) == "bob"


@pytest.mark.asyncio
async def test_caller_identity_garbage_token_is_401() -> None:
    with pytest.raises(HTTPException) as exc_info:
        await get_caller_identity("not-a-jwt")
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_caller_identity_missing_sub_is_401() -> None:
    token = jwt.encode({"type": "access"}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    with pytest.raises(HTTPException) as exc_info:
        await get_caller_identity(token)
    assert exc_info.value.status_code == 401
