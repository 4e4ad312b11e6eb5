from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from mediatrack.config import AUTH_RATE_LIMIT
from mediatrack.database import get_async_session
from mediatrack.limiter import limiter
from mediatrack.schemas.user_schemas import AuthResponse, UserLogin, UserOut, UserRegister
from mediatrack.services import user_service
from mediatrack.utils.token_utils import create_access_token, identity_of

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(user) -> AuthResponse:
    return AuthResponse(
        user=UserOut.model_validate(user),
        token=create_access_token(identity_of(user)),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(AUTH_RATE_LIMIT)
async def register(
    request: Request,
    payload: UserRegister,
    db: AsyncSession = Depends(get_async_session),
):
    user = await user_service.register_user(db, payload)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(AUTH_RATE_LIMIT)
async def login(
    request: Request,
    payload: UserLogin,
    db: AsyncSession = Depends(get_async_session),
):
    user = await user_service.authenticate(db, payload)
    return _auth_response(user)
