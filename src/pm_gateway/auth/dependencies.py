"""FastAPI dependency: get_caller_identity.

Every mutating endpoint acts on behalf of the authenticated caller; the account ID
comes from the Bearer token's `sub` claim and is passed to the services as `caller`.

    @router.post("/markets/{market_id}/resolve")
    async def resolve(caller: Annotated[str, Depends(get_caller_identity)]): ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from config.settings import settings
from src.pm_common.errors import InvalidCredentialsError
from src.pm_gateway.auth.jwt_handler import decode_token

# tokenUrl tells Swagger UI where to get a token (used for the "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=settings.AUTH_TOKEN_URL)

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_caller_identity(token: str = Depends(oauth2_scheme)) -> str:
    """Return the caller's account ID. Raises HTTP 401 on a missing or bad token."""
    try:
        payload = decode_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    account_id = payload.get("sub")
    if not account_id:
        raise _CREDENTIALS_EXCEPTION
    return account_id
