from typing import Optional

from fastapi import Depends

from mediatrack.errors import ForbiddenError, UnauthorizedError
from mediatrack.models.user_model import Role
from mediatrack.policies import require_role
from mediatrack.utils.token_utils import Identity, InvalidTokenError, decode_access_token, oauth2_scheme


async def get_current_identity(token: Optional[str] = Depends(oauth2_scheme)) -> Identity:
    """
    Caller identity from the bearer token.
    No token -> 401, bad or expired token -> 403.
    """
    if not token:
        raise UnauthorizedError("No token provided")
    try:
        return decode_access_token(token)
    except InvalidTokenError:
        raise ForbiddenError("Invalid token")


async def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    # user listing and other moderation routes
    require_role(identity, Role.ADMIN)
    return identity
