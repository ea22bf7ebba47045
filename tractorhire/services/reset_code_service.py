# tractorhire/services/reset_code_service.py
"""
Short-lived numeric codes for password resets.

Codes are six digits, bound to a lower-cased email address and expire after
``settings.reset_code_ttl_minutes``. Storage is pluggable: an in-process store
for single-worker deployments and tests, and a Redis store (``SET ... EX``)
so that every worker sees the same codes and expiry is enforced by Redis.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
import secrets
import threading
from typing import Callable, Dict, Optional, Protocol

from redis import Redis

from ..core.config import settings
from ..core.constants import RESET_CODE_DIGITS
from ..core.exceptions import ValidationException
from ..utils.time_helpers import utc_now

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    normalized = (email or "").strip().lower()
    if not normalized:
        raise ValidationException("Email is required", code="EMAIL_REQUIRED")
    return normalized


class ResetCodeStore(Protocol):
    def put(self, email: str, code: str, ttl: timedelta) -> None:
        ...

    def get(self, email: str) -> Optional[str]:
        ...

    def delete(self, email: str) -> None:
        ...


@dataclass
class _Entry:
    code: str
    expires_at: datetime


class InMemoryResetCodeStore:
    """Process-local store; expired entries are dropped on access."""

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def put(self, email: str, code: str, ttl: timedelta) -> None:
        with self._lock:
            self._prune()
            self._entries[email] = _Entry(code=code, expires_at=self._clock() + ttl)

    def get(self, email: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(email)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[email]
                return None
            return entry.code

    def delete(self, email: str) -> None:
        with self._lock:
            self._entries.pop(email, None)

    def _prune(self) -> None:
        now = self._clock()
        for email in [e for e, entry in self._entries.items() if entry.expires_at <= now]:
            del self._entries[email]

    def __len__(self) -> int:
        with self._lock:
            self._prune()
            return len(self._entries)


class RedisResetCodeStore:
    def __init__(self, client: Redis, namespace: Optional[str] = None):
        self.client = client
        self.namespace = namespace or settings.lock_namespace

    def _key(self, email: str) -> str:
        return f"{self.namespace}:reset_code:{email}"

    def put(self, email: str, code: str, ttl: timedelta) -> None:
        self.client.set(self._key(email), code, ex=int(ttl.total_seconds()))

    def get(self, email: str) -> Optional[str]:
        value = self.client.get(self._key(email))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def delete(self, email: str) -> None:
        self.client.delete(self._key(email))


def default_store() -> ResetCodeStore:
    if settings.redis_url:
        return RedisResetCodeStore(Redis.from_url(settings.redis_url, decode_responses=True))
    return InMemoryResetCodeStore()


class ResetCodeService:
    def __init__(self, store: Optional[ResetCodeStore] = None, ttl: Optional[timedelta] = None):
        self.store = store if store is not None else default_store()
        self.ttl = ttl or timedelta(minutes=settings.reset_code_ttl_minutes)
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def _new_code() -> str:
        return f"{secrets.randbelow(10**RESET_CODE_DIGITS):0{RESET_CODE_DIGITS}d}"

    def generate(self, email: str) -> str:
        """Issue a fresh code for ``email``, replacing any previous one."""
        key = _normalize_email(email)
        code = self._new_code()
        self.store.put(key, code, self.ttl)
        self.logger.info("Reset code issued", extra={"ttl_s": int(self.ttl.total_seconds())})
        return code

    def verify(self, email: str, code: str) -> bool:
        """True if ``code`` matches the live code for ``email``. Does not consume it."""
        stored = self.store.get(_normalize_email(email))
        if stored is None or not code:
            return False
        return secrets.compare_digest(stored, str(code).strip())

    def invalidate(self, email: str) -> None:
        self.store.delete(_normalize_email(email))

    def has_valid_code(self, email: str) -> bool:
        return self.store.get(_normalize_email(email)) is not None
