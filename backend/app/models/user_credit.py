"""Per-user daily AI generation quota."""
from sqlalchemy import Column, String, Integer, DateTime, func
from app.database import Base


class UserCredit(Base):
    """Usage counter for one user, reset lazily after ``reset_at``."""
    __tablename__ = "user_credits"

    owner_email = Column(String(255), primary_key=True)
    used = Column(Integer, nullable=False, default=0)
    max_credits = Column(Integer, nullable=False)
    reset_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
