"""Unit tests for bearer-token authentication."""

from datetime import timedelta

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from farmdesk.config import get_settings
from farmdesk.domain.exceptions import AuthError
from farmdesk.infrastructure.auth import (
    decode_access_token,
    get_current_user_id,
    issue_access_token,
)
from farmdesk.infrastructure.logging.log_config import current_user_id

SECRET = "unit-test-secret-that-is-long-enough"


def test_round_trip_returns_subject():
    token = issue_access_token("user-a", SECRET)
    assert decode_access_token(token, SECRET) == "user-a"


def test_expired_token_is_rejected():
    token = issue_access_token("user-a", SECRET, ttl=timedelta(seconds=-5))
    with pytest.raises(AuthError, match="expired"):
        decode_access_token(token, SECRET)


def test_wrong_secret_is_rejected():
    token = issue_access_token("user-a", SECRET)
    with pytest.raises(AuthError):
        decode_access_token(token, "another-secret-that-is-long-enough")


def test_garbage_is_rejected():
    with pytest.raises(AuthError):
        decode_access_token("not-a-jwt", SECRET)


@pytest.mark.asyncio
async def test_dependency_without_credentials_is_401():
    with pytest.raises(HTTPException) as exc_info:
        await get_current_user_id(None)
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_dependency_resolves_user_id():
    settings = get_settings()
    token = issue_access_token("user-a", settings.jwt_secret, settings.jwt_algorithm)
    credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)

    assert await get_current_user_id(credentials) == "user-a"


@pytest.mark.asyncio
async def test_dependency_tags_log_context_with_user_id():
    settings = get_settings()
    token = issue_access_token("alice@farm.in", settings.jwt_secret, settings.jwt_algorithm)
    credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)

    marker = current_user_id.set(None)
    try:
        await get_current_user_id(credentials)
        assert current_user_id.get() == "alice@farm.in"
    finally:
        current_user_id.reset(marker)
