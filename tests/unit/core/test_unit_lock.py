"""
Per-unit approval lock: process-local fallback and the Redis-backed path.
"""

from unittest.mock import MagicMock, patch

import pytest
from redis.exceptions import LockError

from tractorhire.core import unit_lock as unit_lock_module
from tractorhire.core.config import settings
from tractorhire.core.exceptions import ConflictException
from tractorhire.core.unit_lock import _lock_key, _local_lock, unit_lock


def test_lock_key_format():
    assert _lock_key("T1") == f"{settings.lock_namespace}:lock:unit:T1:approval"


class TestProcessLocalLock:
    def test_lock_is_released_after_block(self):
        with unit_lock("unit-local-release", timeout_s=0.1):
            assert _local_lock("unit-local-release").locked()
        assert not _local_lock("unit-local-release").locked()

    def test_lock_is_released_when_block_raises(self):
        with pytest.raises(RuntimeError):
            with unit_lock("unit-local-error", timeout_s=0.1):
                raise RuntimeError("boom")
        assert not _local_lock("unit-local-error").locked()

    def test_held_lock_times_out_with_conflict(self):
        held = _local_lock("unit-local-held")
        held.acquire()
        try:
            with pytest.raises(ConflictException) as exc_info:
                with unit_lock("unit-local-held", timeout_s=0.05):
                    pass
        finally:
            held.release()
        assert exc_info.value.code == "UNIT_LOCK_TIMEOUT"
        assert exc_info.value.details["unit_id"] == "unit-local-held"

    def test_units_do_not_block_each_other(self):
        with unit_lock("unit-a", timeout_s=0.05):
            with unit_lock("unit-b", timeout_s=0.05):
                pass


class TestRedisLock:
    @pytest.fixture
    def redis_client(self):
        client = MagicMock()
        client.lock.return_value.acquire.return_value = True
        with patch.object(unit_lock_module, "_get_sync_redis", return_value=client):
            yield client

    def test_acquires_and_releases(self, redis_client):
        with unit_lock("T1", timeout_s=2):
            pass
        redis_client.lock.assert_called_once_with(
            _lock_key("T1"),
            timeout=settings.unit_lock_ttl_s,
            blocking=True,
            blocking_timeout=2,
        )
        redis_client.lock.return_value.release.assert_called_once()

    def test_not_acquired_raises_conflict(self, redis_client):
        redis_client.lock.return_value.acquire.return_value = False
        with pytest.raises(ConflictException) as exc_info:
            with unit_lock("T1", timeout_s=0.5):
                pytest.fail("body must not run without the lock")
        assert exc_info.value.code == "UNIT_LOCK_TIMEOUT"
        redis_client.lock.return_value.release.assert_not_called()

    def test_expired_lock_release_is_logged(self, redis_client, caplog):
        redis_client.lock.return_value.release.side_effect = LockError("expired")
        with caplog.at_level("WARNING", logger="tractorhire.core.unit_lock"):
            with unit_lock("T1", timeout_s=0.5):
                pass
        assert "unit_lock_release_after_expiry" in caplog.text
