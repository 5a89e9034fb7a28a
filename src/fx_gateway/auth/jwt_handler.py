"""JWT verification for caller identity.

Tokens are issued by the external identity provider and carry the caller's
role and agency. HS256 with a shared JWT_SECRET.

`create_access_token` mirrors the provider's claim layout; it is used by
operator tooling and the test-suite, never by the request path.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.fx_common.enums import Role
from src.fx_common.errors import InvalidCredentialsError
from src.fx_gateway.auth.capabilities import Caller

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_ACCESS_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)


def create_access_token(caller: Caller) -> str:
    """Issue a short-lived access token (default: 30 min)."""
    now = datetime.now(UTC)
    payload = {
        "sub": caller.user_id,
        "name": caller.name,
        "role": caller.role.value,
        "agency_id": caller.agency_id,
        "type": "access",
        "iat": now,
        "exp": now + _ACCESS_EXPIRE,
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_token(token: str) -> dict[str, str | None]:
    """Decode and validate an access token.

    Raises:
        InvalidCredentialsError: signature invalid, token expired, or not an
        access token.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type") != "access":
        raise InvalidCredentialsError()
    return payload


def caller_from_claims(payload: dict[str, str | None]) -> Caller:
    """Build a Caller from decoded claims; unknown roles are rejected."""
    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or not role:
        raise InvalidCredentialsError()
    try:
        parsed_role = Role(role)
    except ValueError:
        raise InvalidCredentialsError() from None
    return Caller(
        user_id=str(user_id),
        name=str(payload.get("name") or user_id),
        role=parsed_role,
        agency_id=payload.get("agency_id") or None,
    )
