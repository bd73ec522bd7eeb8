"""
Gradewise - Authentication Service
Business logic for user registration, login, and token issuing
"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gradewise.core.config import settings
from gradewise.core.security import (
    create_access_token,
    get_password_hash,
    verify_password,
)
from gradewise.models.user import User
from gradewise.schemas.user import TokenResponse, UserCreate


class AuthenticationError(Exception):
    """Base authentication error."""
    pass


class InvalidCredentialsError(AuthenticationError):
    """Invalid email or password."""
    pass


class AccountDisabledError(AuthenticationError):
    """Account has been deactivated."""
    pass


class AuthService:
    """Service for authentication operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register_user(self, user_data: UserCreate) -> User:
        """
        Register a new user. The role chosen here is permanent.

        Raises:
            ValueError: If email already exists
        """
        existing = await self.db.execute(
            select(User).where(User.email == user_data.email)
        )
        if existing.scalar_one_or_none():
            raise ValueError("Email already registered")

        user = User(
            email=user_data.email,
            hashed_password=get_password_hash(user_data.password),
            name=user_data.name,
            role=user_data.role.value,
            class_name=user_data.class_name,
            subject=user_data.subject,
        )

        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)

        return user

    async def authenticate(self, email: str, password: str) -> User:
        """
        Authenticate user with email and password.

        Raises:
            InvalidCredentialsError: If credentials are invalid
            AccountDisabledError: If the account is deactivated
        """
        result = await self.db.execute(
            select(User).where(User.email == email)
        )
        user = result.scalar_one_or_none()

        if not user or not verify_password(password, user.hashed_password):
            raise InvalidCredentialsError("Invalid email or password")

        if not user.is_active:
            raise AccountDisabledError("Account is deactivated")

        return user

    def create_tokens(self, user: User) -> TokenResponse:
        """Issue an access token carrying the user's role."""
        access_token = create_access_token(
            subject=user.id,
            additional_claims={"role": user.role},
        )
        return TokenResponse(
            access_token=access_token,
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        )

    async def get_user_by_id(self, user_id: int) -> User | None:
        return await self.db.get(User, user_id)
