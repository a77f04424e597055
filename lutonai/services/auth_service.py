"""
Authentication service handling user registration and sign-in.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lutonai.core.exceptions import AuthenticationError, ConflictError, PermissionDeniedError
from lutonai.core.logging import get_logger
from lutonai.core.security import hash_password, verify_password, create_access_token
from lutonai.models.user import User, UserRole
from lutonai.schemas.user import UserCreate, UserLogin

logger = get_logger(__name__)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


async def register_user(db: AsyncSession, user_data: UserCreate, role: UserRole = UserRole.USER) -> User:
    """
    Register a new user with hashed password.
    Raises 409 if the email already exists.
    """
    if await get_user_by_email(db, user_data.email):
        logger.warning("registration_failed", reason="email_exists", email=user_data.email)
        raise ConflictError("User with this email already exists")

    user = User(
        name=user_data.name,
        email=user_data.email.lower(),
        hashed_password=hash_password(user_data.password),
        role=role,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)

    logger.info("user_registered", user_id=user.id, email=user.email, role=user.role.value)
    return user


async def authenticate_user(db: AsyncSession, login_data: UserLogin) -> tuple[User, str]:
    """
    Verify credentials and issue a session token carrying the user's role.
    Raises 401 if credentials are invalid.
    """
    user = await get_user_by_email(db, login_data.email)

    if not user or not verify_password(login_data.password, user.hashed_password):
        logger.warning("login_failed", email=login_data.email)
        raise AuthenticationError("Invalid email or password")

    if not user.is_active:
        raise PermissionDeniedError("Account is deactivated")

    token = create_access_token(data={"sub": str(user.id), "role": user.role.value})
    logger.info("user_logged_in", user_id=user.id)
    return user, token
