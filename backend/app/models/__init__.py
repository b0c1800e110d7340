"""Models package."""
from app.models.project import Project
from app.models.user_credit import UserCredit

__all__ = ["Project", "UserCredit"]
