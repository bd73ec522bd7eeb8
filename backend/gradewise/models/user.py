"""
Gradewise - User Models
SQLAlchemy models for user management and authentication
"""
from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from gradewise.core.database import Base


class UserRole(str, Enum):
    """User roles for RBAC."""
    STUDENT = "student"
    TEACHER = "teacher"
    PRINCIPAL = "principal"
    ADMIN = "admin"
    PARENT = "parent"


# Roles allowed to author tests and trigger evaluation
STAFF_ROLES = (UserRole.TEACHER, UserRole.PRINCIPAL, UserRole.ADMIN)


class User(Base):
    """Platform user. The role is fixed at registration."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(20), default=UserRole.STUDENT.value)

    # Profile info
    name: Mapped[str] = mapped_column(String(200))
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Affiliation: class for students (e.g. "Grade 10-A"), subject for teachers
    class_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    subject: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Users are deactivated, never deleted
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )

    @property
    def user_role(self) -> UserRole:
        return UserRole(self.role)

    def __repr__(self):
        return f"<User {self.email} role={self.role}>"
