"""Security helpers for group passwords and bearer tokens."""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import get_settings

# Group passwords are shared secrets typed by members, hashed like account passwords.
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__rounds=310_000,
)

_ALGORITHM = "HS256"


def hash_group_password(password: str) -> str:
    return pwd_context.hash(password.strip())


def verify_group_password(plain_password: str | None, hashed_password: str | None) -> bool:
    """Return ``True`` when ``plain_password`` matches the stored hash."""

    if not hashed_password:
        return True
    if not plain_password:
        return False
    return pwd_context.verify(plain_password.strip(), hashed_password)


# ---- JWT ----
def create_access_token(user_id: str, expires_delta: timedelta | None = None) -> str:
    """Issue a token whose ``sub`` claim identifies ``user_id``.

    Token issuance belongs to the authentication service; this helper exists
    for scripts and tests that need to act as a given user.
    """

    settings = get_settings()
    expire = datetime.now(tz=timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    return jwt.encode({"sub": user_id, "exp": expire}, settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, get_settings().secret_key, algorithms=[_ALGORITHM])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc
