"""
Gradewise - User Schemas
Pydantic schemas for user registration, authentication, and profiles
"""
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from gradewise.models.user import UserRole


# ============================================================================
# Base Schemas
# ============================================================================

class UserBase(BaseModel):
    """Base user schema with common fields."""
    email: EmailStr
    name: Annotated[str, Field(min_length=1, max_length=200)]
    class_name: Annotated[str, Field(max_length=100)] | None = None
    subject: Annotated[str, Field(max_length=100)] | None = None


# ============================================================================
# Registration & Authentication
# ============================================================================

class UserCreate(UserBase):
    """Schema for user registration. The role cannot be changed afterwards."""
    password: Annotated[str, Field(min_length=8, max_length=72)]
    role: UserRole = UserRole.STUDENT

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        if not any(c.isupper() for c in v):
            raise ValueError("Password must contain at least one uppercase letter")
        if not any(c.islower() for c in v):
            raise ValueError("Password must contain at least one lowercase letter")
        if not any(c.isdigit() for c in v):
            raise ValueError("Password must contain at least one digit")
        return v


class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    """Schema for authentication token response."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int = 1800  # 30 minutes in seconds


# ============================================================================
# User Response Schemas
# ============================================================================

class UserResponse(UserBase):
    """Schema for user response (public data)."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    role: UserRole
    avatar_url: str | None = None
    is_active: bool
    created_at: datetime
