"""FastAPI dependency utilities."""

import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer

from app.config import get_settings
from app.infrastructure.notifications import NotificationPublisher, get_notification_publisher
from app.infrastructure.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)
service_key_scheme = APIKeyHeader(name="X-Service-Key", auto_error=False)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def resolve_user_id(token: str) -> str:
    """Return the user id carried in the ``sub`` claim of ``token``."""

    try:
        payload = decode_access_token(token)
    except ValueError as exc:
        raise _unauthorized() from exc

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise _unauthorized()
    return user_id


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    """Return the id of the authenticated caller."""

    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthorized()
    return resolve_user_id(credentials.credentials)


def require_service_key(service_key: str | None = Depends(service_key_scheme)) -> None:
    """Ensure the caller presented the configured service key."""

    expected = get_settings().service_api_key
    if not expected or not service_key or not secrets.compare_digest(service_key, expected):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Service key required",
        )


def get_publisher() -> NotificationPublisher:
    """Return the publisher used to push new inbox entries."""

    return get_notification_publisher()
