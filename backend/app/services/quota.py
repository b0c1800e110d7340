"""Per-user daily generation quota with lazy, read-triggered reset."""
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.models import UserCredit
from app.schemas.credits import CreditInfo
from app.utils.clock import Clock, ensure_utc, next_midnight, utc_now
from app.utils.exceptions import handle_database_error
from app.utils.logger import logger


class QuotaTracker:
    """
    Bounds how many AI turns a user may run per calendar day (UTC).

    Increments happen under a row lock, so two concurrent turns cannot both
    take the last remaining credit.
    """

    def __init__(self, db: Session, daily_limit: Optional[int] = None, clock: Clock = utc_now):
        self.db = db
        self.daily_limit = settings.daily_credit_limit if daily_limit is None else daily_limit
        self.clock = clock

    def _fresh_info(self, now: datetime) -> CreditInfo:
        return CreditInfo(used=0, max=self.daily_limit, resetDate=next_midnight(now))

    @staticmethod
    def _to_info(row: UserCredit) -> CreditInfo:
        return CreditInfo(used=row.used, max=row.max_credits, resetDate=ensure_utc(row.reset_at))

    def _reset_row(self, row: UserCredit, now: datetime) -> None:
        row.used = 0
        row.max_credits = self.daily_limit
        row.reset_at = next_midnight(now)

    def _is_due(self, row: UserCredit, now: datetime) -> bool:
        return now >= ensure_utc(row.reset_at)

    def _locked_row(self, owner_email: str, now: datetime) -> UserCredit:
        """Fetch the user's row with a write lock, creating it on first use."""
        row = self.db.query(UserCredit).filter(
            UserCredit.owner_email == owner_email
        ).with_for_update().first()
        if row:
            return row

        row = UserCredit(
            owner_email=owner_email,
            used=0,
            max_credits=self.daily_limit,
            reset_at=next_midnight(now),
        )
        try:
            self.db.add(row)
            self.db.flush()
        except IntegrityError:
            # A concurrent request created the row first; lock theirs instead
            self.db.rollback()
            row = self.db.query(UserCredit).filter(
                UserCredit.owner_email == owner_email
            ).with_for_update().one()
        return row

    def get_usage(self, owner_email: str) -> CreditInfo:
        """
        Current usage, resetting the stored counter when its reset time has passed.

        Never raises: on storage failure the user is treated as having full quota.
        """
        now = self.clock()
        try:
            row = self.db.query(UserCredit).filter(UserCredit.owner_email == owner_email).first()
            if not row:
                return self._fresh_info(now)
            if self._is_due(row, now):
                row = self._locked_row(owner_email, now)
                if self._is_due(row, now):
                    self._reset_row(row, now)
                    logger.info(f"Daily credits reset for {owner_email}")
                self.db.commit()
            return self._to_info(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to read credits for {owner_email}: {e}", exc_info=True)
            return self._fresh_info(now)

    def consume(self, owner_email: str) -> bool:
        """
        Take one credit.

        Returns:
            True if a credit was taken, False if the daily limit is reached

        Raises:
            TransientStorageError: if the increment could not be persisted
        """
        now = self.clock()
        try:
            row = self._locked_row(owner_email, now)
            if self._is_due(row, now):
                self._reset_row(row, now)
            if row.used >= row.max_credits:
                self.db.commit()
                logger.info(f"Credit denied for {owner_email}: {row.used}/{row.max_credits} used")
                return False
            row.used += 1
            self.db.commit()
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to consume credit for {owner_email}: {e}", exc_info=True)
            raise handle_database_error(e, "consume_credit")

    def remaining(self, owner_email: str) -> int:
        return self.get_usage(owner_email).remaining

    def reset_time(self, owner_email: str) -> datetime:
        return self.get_usage(owner_email).resetDate

    def reset_now(self, owner_email: str) -> CreditInfo:
        """Administrative reset, regardless of the stored reset time."""
        now = self.clock()
        try:
            row = self._locked_row(owner_email, now)
            self._reset_row(row, now)
            self.db.commit()
            logger.info(f"Credits manually reset for {owner_email}")
            return self._to_info(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to reset credits for {owner_email}: {e}", exc_info=True)
            raise handle_database_error(e, "reset_credits")
