"""
Unit Tests for transient storage retries
"""
import pytest

from app.utils.exceptions import NotFoundError, TransientStorageError
from app.utils.retry import with_storage_retries


class FlakyOperation:
    def __init__(self, failures: int, error=None):
        self.failures = failures
        self.error = error or TransientStorageError("Storage unavailable")
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


class TestWithStorageRetries:
    """Test bounded retry behaviour"""

    @pytest.mark.asyncio
    async def test_succeeds_after_transient_failures(self):
        operation = FlakyOperation(failures=2)

        assert await with_storage_retries(operation, attempts=3, delay_seconds=0) == "ok"
        assert operation.calls == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_last_attempt(self):
        operation = FlakyOperation(failures=5)

        with pytest.raises(TransientStorageError):
            await with_storage_retries(operation, attempts=3, delay_seconds=0)
        assert operation.calls == 3

    @pytest.mark.asyncio
    async def test_other_errors_are_not_retried(self):
        operation = FlakyOperation(failures=1, error=NotFoundError("Project not found"))

        with pytest.raises(NotFoundError):
            await with_storage_retries(operation, attempts=3, delay_seconds=0)
        assert operation.calls == 1

    @pytest.mark.asyncio
    async def test_at_least_one_attempt(self):
        operation = FlakyOperation(failures=0)

        assert await with_storage_retries(operation, attempts=0, delay_seconds=0) == "ok"

    @pytest.mark.asyncio
    async def test_backoff_awaits_async_sleep(self, monkeypatch):
        delays = []

        async def fake_sleep(seconds):
            delays.append(seconds)

        monkeypatch.setattr("app.utils.retry.asyncio.sleep", fake_sleep)
        operation = FlakyOperation(failures=2)

        assert await with_storage_retries(operation, attempts=3, delay_seconds=0.5) == "ok"
        assert delays == [0.5, 1.0]
