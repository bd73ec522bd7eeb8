"""
Gradewise - Request Context
Authenticated identity passed explicitly from the API layer to services.
"""
from dataclasses import dataclass

from gradewise.models.user import STAFF_ROLES, UserRole


@dataclass(frozen=True)
class RequestContext:
    """Who is making this request."""
    user_id: int
    role: UserRole

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT
