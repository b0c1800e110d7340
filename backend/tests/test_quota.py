"""
Unit Tests for the daily generation quota
"""
from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from app.models import UserCredit
from app.services.quota import QuotaTracker
from app.utils.exceptions import TransientStorageError

USER = "u1@example.com"


@pytest.fixture
def tracker(db_session, clock) -> QuotaTracker:
    return QuotaTracker(db_session, daily_limit=10, clock=clock)


class TestUsage:
    """Test reading usage"""

    def test_fresh_user_has_full_quota(self, tracker):
        info = tracker.get_usage(USER)

        assert info.used == 0
        assert info.max == 10
        assert tracker.remaining(USER) == 10

    def test_reset_date_is_next_utc_midnight(self, tracker):
        assert tracker.reset_time(USER) == datetime(2026, 3, 15, tzinfo=timezone.utc)

    def test_reading_does_not_create_a_row(self, tracker, db_session):
        tracker.get_usage(USER)

        assert db_session.query(UserCredit).count() == 0

    def test_read_failure_fails_open(self, tracker):
        error = OperationalError("SELECT", {}, Exception("connection refused"))
        with patch.object(tracker.db, "query", side_effect=error):
            info = tracker.get_usage(USER)

        assert info.used == 0
        assert info.remaining == 10


class TestConsume:
    """Test spending credits"""

    def test_consume_increments(self, tracker):
        assert tracker.consume(USER) is True
        assert tracker.consume(USER) is True

        assert tracker.get_usage(USER).used == 2
        assert tracker.remaining(USER) == 8

    def test_limit_reached_denies_without_increment(self, tracker):
        for _ in range(10):
            assert tracker.consume(USER) is True

        assert tracker.consume(USER) is False
        assert tracker.consume(USER) is False
        assert tracker.get_usage(USER).used == 10
        assert tracker.remaining(USER) == 0

    def test_users_are_independent(self, tracker):
        for _ in range(10):
            tracker.consume(USER)

        assert tracker.consume("u2@example.com") is True
        assert tracker.remaining("u2@example.com") == 9

    def test_write_failure_raises_transient_error(self, tracker):
        tracker.consume(USER)
        error = OperationalError("UPDATE", {}, Exception("server closed the connection"))
        with patch.object(tracker.db, "commit", side_effect=error):
            with pytest.raises(TransientStorageError):
                tracker.consume(USER)

        assert tracker.get_usage(USER).used == 1


class TestReset:
    """Test lazy and manual resets"""

    def test_usage_resets_after_reset_date(self, tracker, clock):
        for _ in range(10):
            tracker.consume(USER)
        previous_reset = tracker.reset_time(USER)

        clock.advance(days=1)
        info = tracker.get_usage(USER)

        assert info.used == 0
        assert info.resetDate > previous_reset
        assert tracker.consume(USER) is True

    def test_no_reset_before_midnight(self, tracker, clock):
        tracker.consume(USER)

        clock.advance(hours=8)  # 23:30 UTC, same day

        assert tracker.get_usage(USER).used == 1

    def test_reset_is_idempotent(self, tracker, clock):
        tracker.consume(USER)
        clock.advance(days=2)

        first = tracker.get_usage(USER)
        second = tracker.get_usage(USER)

        assert first == second
        assert second.used == 0

    def test_consume_after_reset_date_starts_new_day(self, tracker, clock):
        for _ in range(10):
            tracker.consume(USER)

        clock.advance(hours=9)

        assert tracker.consume(USER) is True
        assert tracker.get_usage(USER).used == 1

    def test_reset_now_clears_usage(self, tracker):
        for _ in range(10):
            tracker.consume(USER)

        info = tracker.reset_now(USER)

        assert info.used == 0
        assert tracker.remaining(USER) == 10

    def test_reset_now_picks_up_new_limit(self, db_session, clock):
        QuotaTracker(db_session, daily_limit=3, clock=clock).consume(USER)

        info = QuotaTracker(db_session, daily_limit=5, clock=clock).reset_now(USER)

        assert info.max == 5
