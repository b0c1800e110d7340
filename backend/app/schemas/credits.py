"""Schemas for the daily generation quota."""
from datetime import datetime

from pydantic import BaseModel, Field


class CreditInfo(BaseModel):
    """Current usage of one user."""
    used: int = Field(..., ge=0)
    max: int
    resetDate: datetime

    @property
    def remaining(self) -> int:
        return max(0, self.max - self.used)


class CreditsResponse(BaseModel):
    """Response schema for GET /api/credits."""
    used: int
    max: int
    remaining: int
    resetDate: datetime

    @classmethod
    def from_info(cls, info: CreditInfo) -> "CreditsResponse":
        return cls(used=info.used, max=info.max, remaining=info.remaining, resetDate=info.resetDate)


class ConsumeResponse(CreditsResponse):
    """Response schema for POST /api/credits/consume."""
    granted: bool
