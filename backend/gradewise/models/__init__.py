# Gradewise Models
from gradewise.models.user import User, UserRole, STAFF_ROLES
from gradewise.models.test import Test, TestStatus, Question, QuestionType
from gradewise.models.attempt import TestAttempt, AttemptStatus, Answer
from gradewise.models.analytics import Analytics

__all__ = [
    # User
    "User",
    "UserRole",
    "STAFF_ROLES",
    # Test
    "Test",
    "TestStatus",
    "Question",
    "QuestionType",
    # Attempt
    "TestAttempt",
    "AttemptStatus",
    "Answer",
    # Analytics
    "Analytics",
]
