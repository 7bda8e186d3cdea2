"""Execute prune batches against the Docker daemon."""

import logging
import uuid
from collections.abc import Iterable
from enum import Enum
from typing import Protocol

from docktidy.errors import DocktidyError, HistoryError
from docktidy.history import HistoryStore
from docktidy.models import (
    PruneCandidate,
    PruneError,
    PruneHistory,
    PruneOptions,
    PruneResult,
    ResourceType,
    utcnow,
)

logger = logging.getLogger(__name__)

_TYPE_ORDER = {t: i for i, t in enumerate(ResourceType)}


class Remover(Protocol):
    def remove_resource(self, resource_type: ResourceType, resource_id: str) -> None: ...


class PruneState(str, Enum):
    PENDING = "pending"
    DRY_RUN = "dry_run"
    EXECUTING = "executing"
    COMPLETED = "completed"


def prune_order(candidates: Iterable[PruneCandidate]) -> list[PruneCandidate]:
    """Containers first, then images, volumes, networks; biggest first within a type."""
    return sorted(candidates, key=lambda c: (_TYPE_ORDER[c.type], -c.size, c.id))


class PruneCoordinator:
    """Remove candidates one by one, collecting failures instead of aborting."""

    def __init__(self, daemon: Remover, history: HistoryStore | None = None):
        self.daemon = daemon
        self.history = history
        self.state = PruneState.PENDING

    def execute(self, candidates: Iterable[PruneCandidate], options: PruneOptions) -> PruneResult:
        """Prune the given candidates.

        Args:
            candidates: Resources selected for removal
            options: Dry-run flag and the filters that produced the candidates

        Returns:
            PruneResult with totals and per-resource errors
        """
        result = PruneResult(dry_run=options.dry_run)
        self.state = PruneState.DRY_RUN if options.dry_run else PruneState.EXECUTING

        try:
            for candidate in prune_order(candidates):
                if options.dry_run:
                    logger.debug("[DRY-RUN] Would remove %s %s", candidate.type.value, candidate.id)
                    result.resources_pruned += 1
                    result.space_reclaimed += candidate.size
                    continue
                self._remove(candidate, result)
        finally:
            self.state = PruneState.COMPLETED
            self._record(result, options)
        return result

    def _remove(self, candidate: PruneCandidate, result: PruneResult) -> None:
        try:
            self.daemon.remove_resource(candidate.type, candidate.id)
        except DocktidyError as e:
            message = str(e)
        except Exception as e:
            message = f"{type(e).__name__}: {e}"
        else:
            logger.info("Removed %s %s", candidate.type.value, candidate.id)
            result.resources_pruned += 1
            result.space_reclaimed += candidate.size
            return
        logger.warning("Failed to remove %s %s: %s", candidate.type.value, candidate.id, message)
        result.errors.append(PruneError(candidate.type, candidate.id, message))

    def _record(self, result: PruneResult, options: PruneOptions) -> None:
        if self.history is None:
            return
        entry = PruneHistory(
            id=uuid.uuid4().hex,
            timestamp=utcnow(),
            result=result,
            options=options,
        )
        try:
            self.history.save_prune_history(entry)
        except (HistoryError, OSError) as e:
            logger.warning("Could not record prune history: %s", e)
