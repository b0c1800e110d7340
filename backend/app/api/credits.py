"""Daily generation quota endpoints."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.auth.identity import UserIdentity, get_current_user, require_admin
from app.database import get_db
from app.schemas.credits import ConsumeResponse, CreditsResponse
from app.services.quota import QuotaTracker
from app.utils.retry import with_storage_retries

router = APIRouter(prefix="/api/credits", tags=["credits"])


def get_quota_tracker(db: Session = Depends(get_db)) -> QuotaTracker:
    """Dependency for getting the quota tracker."""
    return QuotaTracker(db)


@router.get("", response_model=CreditsResponse)
async def get_credits(
    user: UserIdentity = Depends(get_current_user),
    tracker: QuotaTracker = Depends(get_quota_tracker),
) -> CreditsResponse:
    """Get today's usage, remaining credits and the next reset time."""
    return CreditsResponse.from_info(tracker.get_usage(user.email))


@router.post("/consume", response_model=ConsumeResponse)
async def consume_credit(
    user: UserIdentity = Depends(get_current_user),
    tracker: QuotaTracker = Depends(get_quota_tracker),
) -> ConsumeResponse:
    """
    Spend one credit.

    Returns granted=false (HTTP 200) when the daily limit is already reached.
    """
    # Single attempt: consume is not idempotent
    granted = tracker.consume(user.email)
    info = tracker.get_usage(user.email)
    return ConsumeResponse(granted=granted, **CreditsResponse.from_info(info).model_dump())


@router.post("/reset", response_model=CreditsResponse, dependencies=[Depends(require_admin)])
async def reset_credits(
    email: str = Query(..., description="User whose credits are reset"),
    tracker: QuotaTracker = Depends(get_quota_tracker),
) -> CreditsResponse:
    """Administrative reset of a user's daily counter."""
    info = await with_storage_retries(lambda: tracker.reset_now(email.strip().lower()))
    return CreditsResponse.from_info(info)
