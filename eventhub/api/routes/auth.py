"""Authentication routes for user registration, login and the current user."""
from fastapi import APIRouter, Depends, Request, status
from eventhub.schemas import UserCreate, UserDetailOut, LoginRequest, AuthResponse
from eventhub.services.auth_service import AuthService
from eventhub.db.session import get_session
from eventhub.db.models.user import User
from eventhub.auth import get_current_user
from eventhub.core.config import settings
from sqlalchemy.ext.asyncio import AsyncSession
from slowapi import Limiter
from slowapi.util import get_remote_address

router = APIRouter(prefix="/auth", tags=["auth"])
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


def get_auth_service(session: AsyncSession = Depends(get_session)) -> AuthService:
    return AuthService(session)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("3/minute")
async def register(
    request: Request,
    payload: UserCreate,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Register a new user account and log it in.

    Rate limit: 3 requests per minute
    """
    result = await auth_service.register(payload)
    return {"message": "User created successfully", **result}


@router.post("/login", response_model=AuthResponse)
@limiter.limit("5/minute")
async def login(
    request: Request,
    form_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Login endpoint returning an access token.

    Rate limit: 5 requests per minute
    """
    result = await auth_service.login(form_data)
    return {"message": "Login successful", **result}


@router.get("/me", response_model=UserDetailOut)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    return current_user
