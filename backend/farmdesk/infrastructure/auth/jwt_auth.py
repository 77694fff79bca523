"""Bearer-token authentication.

Session tokens are HS256 JWTs whose ``sub`` claim is the user id. Every
data endpoint resolves the caller through ``get_current_user_id`` and scopes
its reads and writes to that id.
"""

import logging
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from farmdesk.config import get_settings
from farmdesk.domain.exceptions import AuthError
from farmdesk.infrastructure.logging.log_config import current_user_id

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def decode_access_token(token: str, secret: str, algorithm: str = "HS256") -> str:
    """Return the user id carried by ``token``.

    Raises:
        AuthError: If the token is expired, malformed or has no subject.
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"verify_aud": False},
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthError("Session expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthError("Invalid session token") from exc

    user_id = payload.get("sub")
    if not user_id or not isinstance(user_id, str):
        raise AuthError("Session token has no subject")
    return user_id


def issue_access_token(
    user_id: str,
    secret: str,
    algorithm: str = "HS256",
    ttl: timedelta | None = timedelta(hours=1),
) -> str:
    """Sign a session token for ``user_id``. Used by tests and local tooling."""
    now = datetime.now(timezone.utc)
    claims: dict = {"sub": user_id, "iat": now}
    if ttl is not None:
        claims["exp"] = now + ttl
    return jwt.encode(claims, secret, algorithm=algorithm)


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    """FastAPI dependency: resolve the authenticated user id or answer 401."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Authentication required")

    settings = get_settings()
    try:
        user_id = decode_access_token(
            credentials.credentials, settings.jwt_secret, settings.jwt_algorithm
        )
    except AuthError as exc:
        logger.info("Rejected bearer token: %s", exc.message)
        raise HTTPException(status_code=401, detail=exc.message) from exc

    current_user_id.set(user_id)
    return user_id
