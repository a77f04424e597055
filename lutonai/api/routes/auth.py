"""
Authentication endpoints: register, sign in and current session.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from lutonai.core.security import get_current_user
from lutonai.db.session import get_db
from lutonai.models.user import User
from lutonai.schemas.user import UserCreate, UserResponse, UserLogin, Token
from lutonai.services.auth_service import register_user, authenticate_user
from lutonai.services.rate_limit_service import rate_limited

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a new user account. New accounts always get the USER role."""
    user = await register_user(db, user_data)
    return user


@router.post("/signin", response_model=Token, dependencies=[Depends(rate_limited("signin"))])
async def signin(login_data: UserLogin, db: AsyncSession = Depends(get_db)):
    """Authenticate and receive a JWT access token."""
    user, token = await authenticate_user(db, login_data)
    return Token(access_token=token, user=UserResponse.model_validate(user))


@router.get("/session", response_model=UserResponse)
async def session(user: User = Depends(get_current_user)):
    return user
