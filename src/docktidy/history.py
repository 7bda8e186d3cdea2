"""Usage and prune history stores."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime

from docktidy.errors import HistoryError
from docktidy.models import PruneHistory, Resource, UsageHistory, utcnow

logger = logging.getLogger(__name__)


class HistoryStore(ABC):
    """Append-only journal of resource usage and prune batches."""

    @abstractmethod
    def save_usage_history(self, entry: UsageHistory) -> None:
        """Record (or replace) the usage entry for a resource."""

    @abstractmethod
    def get_usage_history(self, resource_id: str) -> UsageHistory | None:
        """Return the usage entry for a resource, or None if never seen."""

    @abstractmethod
    def save_prune_history(self, entry: PruneHistory) -> None:
        """Append a prune batch to the journal."""

    @abstractmethod
    def list_prune_history(self, limit: int) -> list[PruneHistory]:
        """Return up to `limit` prune entries, newest first."""

    def close(self) -> None:
        """Release any underlying resources."""


class MemoryHistoryStore(HistoryStore):
    """History kept for the lifetime of the process."""

    def __init__(self) -> None:
        self._usage: dict[str, UsageHistory] = {}
        self._prunes: list[PruneHistory] = []
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise HistoryError("history store is closed")

    def save_usage_history(self, entry: UsageHistory) -> None:
        self._check_open()
        self._usage[entry.resource_id] = entry

    def get_usage_history(self, resource_id: str) -> UsageHistory | None:
        self._check_open()
        return self._usage.get(resource_id)

    def save_prune_history(self, entry: PruneHistory) -> None:
        self._check_open()
        self._prunes.append(entry)

    def list_prune_history(self, limit: int) -> list[PruneHistory]:
        self._check_open()
        if limit <= 0:
            return []
        return sorted(self._prunes, key=lambda h: h.timestamp, reverse=True)[:limit]

    def close(self) -> None:
        self._closed = True


def record_observations(
    store: HistoryStore,
    resources: Iterable[Resource],
    now: datetime | None = None,
) -> int:
    """Bump usage history for every resource currently in use.

    Args:
        store: History store to write to
        resources: Resources observed in the latest daemon snapshot
        now: Observation time (defaults to the current UTC time)

    Returns:
        Number of entries written
    """
    now = now or utcnow()
    written = 0
    for resource in resources:
        if not resource.in_use:
            continue
        previous = store.get_usage_history(resource.id)
        count = previous.access_count if previous else 0
        store.save_usage_history(
            UsageHistory(
                resource_id=resource.id,
                resource_type=resource.type,
                last_accessed=now,
                access_count=count + 1,
            )
        )
        written += 1
    logger.debug("Recorded usage for %d in-use resources", written)
    return written
