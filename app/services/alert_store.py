"""
Pending budget alerts, keyed per user by (budget_id, tier).

The store is a notification cache, not a system of record: every alert can be
re-derived by evaluating the user's budgets again. Two backends share the
same contract:

- InMemoryAlertStore: process-local dict, used in tests and single-worker runs
- RedisAlertStore: one Redis hash per user, shared between workers

store() is an atomic insert-if-absent so concurrent evaluations of the same
budget never produce duplicates.
"""
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Union

from redis import Redis

from app.schemas.alert import AlertTier, BudgetAlert

logger = logging.getLogger(__name__)

UserId = Union[uuid.UUID, str]


def _alert_key(budget_id, tier: AlertTier) -> str:
    return f"{budget_id}:{AlertTier(tier).value}"


class AlertStore(ABC):
    """Per-user collection of pending alerts, deduplicated by (budget_id, tier)"""

    @abstractmethod
    def store(self, user_id: UserId, alert: BudgetAlert) -> bool:
        """Insert the alert unless one with the same budget and tier exists. Returns True if inserted."""

    @abstractmethod
    def get_pending(self, user_id: UserId) -> List[BudgetAlert]:
        """All alerts currently held for the user (order not significant)"""

    @abstractmethod
    def clear_all(self, user_id: UserId) -> None:
        ...

    @abstractmethod
    def clear_one(self, user_id: UserId, budget_id, tier: AlertTier) -> bool:
        """Remove a single alert. Returns True if something was removed."""

    def count(self, user_id: UserId) -> int:
        return len(self.get_pending(user_id))


class InMemoryAlertStore(AlertStore):

    def __init__(self):
        self._alerts: Dict[str, Dict[str, BudgetAlert]] = {}
        self._lock = threading.Lock()

    def store(self, user_id: UserId, alert: BudgetAlert) -> bool:
        with self._lock:
            user_alerts = self._alerts.setdefault(str(user_id), {})
            if alert.key in user_alerts:
                return False
            user_alerts[alert.key] = alert
            return True

    def get_pending(self, user_id: UserId) -> List[BudgetAlert]:
        with self._lock:
            return list(self._alerts.get(str(user_id), {}).values())

    def clear_all(self, user_id: UserId) -> None:
        with self._lock:
            self._alerts.pop(str(user_id), None)

    def clear_one(self, user_id: UserId, budget_id, tier: AlertTier) -> bool:
        with self._lock:
            user_alerts = self._alerts.get(str(user_id))
            if not user_alerts:
                return False
            removed = user_alerts.pop(_alert_key(budget_id, tier), None) is not None
            if not user_alerts:
                # No empty per-user entries left behind
                del self._alerts[str(user_id)]
            return removed


class RedisAlertStore(AlertStore):
    """
    Alerts live in a hash per user: field "<budget_id>:<tier>", value the alert JSON.

    HSETNX gives the atomic insert-if-absent, and Redis drops a hash as soon as
    its last field is deleted, so clear_one never leaves an empty entry.
    """

    def __init__(self, client: Redis, prefix: str = "budget_alerts", ttl_seconds: Optional[int] = None):
        self.client = client
        self.prefix = prefix
        self.ttl_seconds = ttl_seconds or None

    def _user_key(self, user_id: UserId) -> str:
        return f"{self.prefix}:{user_id}"

    def store(self, user_id: UserId, alert: BudgetAlert) -> bool:
        key = self._user_key(user_id)
        inserted = bool(self.client.hsetnx(key, alert.key, alert.model_dump_json()))
        if inserted and self.ttl_seconds:
            self.client.expire(key, self.ttl_seconds)
        return inserted

    def get_pending(self, user_id: UserId) -> List[BudgetAlert]:
        alerts = []
        for raw in self.client.hvals(self._user_key(user_id)):
            try:
                alerts.append(BudgetAlert.model_validate_json(raw))
            except ValueError:
                logger.warning(f"Dropping unreadable alert payload for user {user_id}")
        return alerts

    def clear_all(self, user_id: UserId) -> None:
        self.client.delete(self._user_key(user_id))

    def clear_one(self, user_id: UserId, budget_id, tier: AlertTier) -> bool:
        return bool(self.client.hdel(self._user_key(user_id), _alert_key(budget_id, tier)))

    def count(self, user_id: UserId) -> int:
        return int(self.client.hlen(self._user_key(user_id)))


_default_store: Optional[AlertStore] = None
_default_store_lock = threading.Lock()


def build_alert_store(backend: str, ttl_seconds: int = 0) -> AlertStore:
    if backend == "memory":
        return InMemoryAlertStore()
    if backend == "redis":
        from app.utils.redis_client import get_client
        return RedisAlertStore(get_client(), ttl_seconds=ttl_seconds)
    raise ValueError(f"Unknown alert store backend: {backend!r}")


def get_alert_store() -> AlertStore:
    """Process-wide store selected by ALERT_STORE_BACKEND (FastAPI dependency)"""
    global _default_store
    if _default_store is None:
        with _default_store_lock:
            if _default_store is None:
                from app.core.config import settings
                _default_store = build_alert_store(
                    settings.ALERT_STORE_BACKEND, settings.ALERT_STORE_TTL_SECONDS
                )
                logger.info(f"Using {settings.ALERT_STORE_BACKEND} alert store")
    return _default_store
