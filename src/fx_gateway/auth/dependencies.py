"""FastAPI dependency: get_current_caller.

Usage in any protected router:
    from src.fx_gateway.auth.dependencies import get_current_caller

    @router.get("/protected")
    async def protected(caller: Caller = Depends(get_current_caller)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.fx_common.errors import InvalidCredentialsError
from src.fx_gateway.auth.capabilities import Caller
from src.fx_gateway.auth.jwt_handler import caller_from_claims, decode_token

# tokenUrl points at the external identity provider's login endpoint
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_caller(token: str = Depends(oauth2_scheme)) -> Caller:
    """Extract and validate the JWT Bearer token, return the Caller.

    Raises HTTP 401 if the token is missing, invalid, expired, or carries an
    unknown role. Capability checks happen later, in the services.
    """
    try:
        return caller_from_claims(decode_token(token))
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None
