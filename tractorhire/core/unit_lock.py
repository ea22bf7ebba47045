"""
Per-unit mutual exclusion for approval decisions.

The capacity re-check and the APPROVED write must not interleave for the same
unit. With ``settings.redis_url`` configured the lock is a Redis lock shared by
every worker process; without it the lock is process-local.
"""

from __future__ import annotations

from contextlib import contextmanager
import logging
import threading
from typing import Dict, Iterator, Optional

from redis import Redis
from redis.exceptions import LockError, RedisError

from ..monitoring.prometheus_metrics import prometheus_metrics
from .config import settings
from .exceptions import ConflictException

logger = logging.getLogger(__name__)

_SYNC_REDIS: Optional[Redis] = None
_SYNC_REDIS_LOCK = threading.Lock()

_LOCAL_LOCKS: Dict[str, threading.Lock] = {}
_LOCAL_LOCKS_GUARD = threading.Lock()


def _lock_key(unit_id: str) -> str:
    return f"{settings.lock_namespace}:lock:unit:{unit_id}:approval"


def _get_sync_redis() -> Optional[Redis]:
    global _SYNC_REDIS
    if not settings.redis_url:
        return None
    if _SYNC_REDIS is not None:
        return _SYNC_REDIS
    with _SYNC_REDIS_LOCK:
        if _SYNC_REDIS is None:
            _SYNC_REDIS = Redis.from_url(settings.redis_url, decode_responses=True)
        return _SYNC_REDIS


def _local_lock(unit_id: str) -> threading.Lock:
    with _LOCAL_LOCKS_GUARD:
        lock = _LOCAL_LOCKS.get(unit_id)
        if lock is None:
            lock = threading.Lock()
            _LOCAL_LOCKS[unit_id] = lock
        return lock


def _timeout_error(unit_id: str, timeout_s: float) -> ConflictException:
    return ConflictException(
        "Another approval for this unit is in progress. Please retry.",
        code="UNIT_LOCK_TIMEOUT",
        details={"unit_id": unit_id, "timeout_s": timeout_s},
    )


@contextmanager
def _redis_unit_lock(client: Redis, unit_id: str, timeout_s: float) -> Iterator[None]:
    lock = client.lock(
        _lock_key(unit_id),
        timeout=settings.unit_lock_ttl_s,
        blocking=True,
        blocking_timeout=timeout_s,
    )
    try:
        acquired = lock.acquire()
    except RedisError as exc:
        prometheus_metrics.record_unit_lock("acquire", "error")
        logger.error(
            "unit_lock_redis_acquire_failed",
            extra={"unit_id": unit_id, "error": str(exc), "error_type": type(exc).__name__},
        )
        raise
    if not acquired:
        prometheus_metrics.record_unit_lock("acquire", "timeout")
        raise _timeout_error(unit_id, timeout_s)

    prometheus_metrics.record_unit_lock("acquire", "success")
    try:
        yield
    finally:
        try:
            lock.release()
            prometheus_metrics.record_unit_lock("release", "success")
        except LockError as exc:
            # Expired before release; another holder may already own it.
            prometheus_metrics.record_unit_lock("release", "expired")
            logger.warning(
                "unit_lock_release_after_expiry",
                extra={"unit_id": unit_id, "error": str(exc)},
            )


@contextmanager
def _process_unit_lock(unit_id: str, timeout_s: float) -> Iterator[None]:
    lock = _local_lock(unit_id)
    if not lock.acquire(timeout=timeout_s):
        prometheus_metrics.record_unit_lock("acquire", "timeout")
        raise _timeout_error(unit_id, timeout_s)
    prometheus_metrics.record_unit_lock("acquire", "success")
    try:
        yield
    finally:
        lock.release()
        prometheus_metrics.record_unit_lock("release", "success")


@contextmanager
def unit_lock(unit_id: str, timeout_s: Optional[float] = None) -> Iterator[None]:
    """
    Serialize approval decisions for one unit.

    Raises:
        ConflictException: the lock could not be obtained within ``timeout_s``
    """
    wait = settings.unit_lock_timeout_s if timeout_s is None else timeout_s
    client = _get_sync_redis()
    if client is not None:
        with _redis_unit_lock(client, unit_id, wait):
            yield
    else:
        with _process_unit_lock(unit_id, wait):
            yield
