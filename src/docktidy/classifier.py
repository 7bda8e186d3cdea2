"""Safety classification of Docker resources into prune candidates."""

import logging
import re
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from docktidy.history import HistoryStore
from docktidy.models import (
    PruneCandidate,
    PruneOptions,
    Resource,
    ResourceType,
    RiskLevel,
    UsageHistory,
    days_between,
    utcnow,
)

logger = logging.getLogger(__name__)

BUILTIN_NETWORKS = frozenset({"bridge", "host", "none"})
ANONYMOUS_VOLUME = re.compile(r"^[0-9a-f]{64}$")


class Exclusion(str, Enum):
    """Why a resource was kept out of the candidate list."""

    UNCLASSIFIABLE = "exclusion.unclassifiable"
    IN_USE = "exclusion.in_use"
    BUILTIN = "exclusion.builtin"
    TYPE_FILTERED = "exclusion.type_filtered"
    PINNED = "exclusion.pinned"
    TOO_RECENT = "exclusion.too_recent"
    TOO_SMALL = "exclusion.too_small"


class Reason(str, Enum):
    """Which rule produced a candidate's risk level."""

    NAMED_VOLUME = "reason.named_volume"
    HIGH_RISK_TYPE = "reason.high_risk_type"
    NO_HISTORY = "reason.no_history"
    RECENTLY_USED = "reason.recently_used"
    DANGLING_IMAGE = "reason.dangling_image"
    STOPPED_CONTAINER = "reason.stopped_container"
    ANONYMOUS_VOLUME = "reason.anonymous_volume"
    IDLE = "reason.idle"


@dataclass(frozen=True)
class ClassifierPolicy:
    """Thresholds for risk assignment."""

    safe_after_days: int = 90
    high_risk_types: frozenset[ResourceType] = frozenset()


@dataclass
class ClassificationResult:
    """Candidates from one classification pass plus exclusion statistics."""

    candidates: list[PruneCandidate]
    total_resources: int
    exclusions: Counter = field(default_factory=Counter)

    @property
    def reclaimable_bytes(self) -> int:
        return sum(c.size for c in self.candidates)

    @property
    def unclassifiable(self) -> int:
        return self.exclusions[Exclusion.UNCLASSIFIABLE]


def is_dangling_image(resource: Resource) -> bool:
    return not [t for t in resource.tags if t and t != "<none>:<none>"]


def is_anonymous_volume(resource: Resource) -> bool:
    return bool(ANONYMOUS_VOLUME.match(resource.name or resource.id))


def matches_label(resource: Resource, patterns: Iterable[str]) -> bool:
    """True if the resource carries any label key or key=value pair in patterns."""
    for pattern in patterns:
        key, sep, value = pattern.partition("=")
        if key not in resource.labels:
            continue
        if not sep or resource.labels[key] == value:
            return True
    return False


class SafetyClassifier:
    """Assign risk levels to resources, counting the ones it excludes."""

    def __init__(self, policy: ClassifierPolicy | None = None, now: datetime | None = None):
        self.policy = policy or ClassifierPolicy()
        self.now = now or utcnow()
        self.exclusions: Counter = Counter()

    def _exclude(self, resource: Resource, exclusion: Exclusion) -> None:
        self.exclusions[exclusion] += 1
        logger.debug("Excluded %s %s: %s", getattr(resource.type, "value", resource.type), resource.id, exclusion.value)

    def last_use(self, resource: Resource, history: UsageHistory | None) -> datetime | None:
        """The later of the daemon's last-use time and the recorded history."""
        if resource.last_used is None:
            return None
        if history is not None and history.last_accessed > resource.last_used:
            return history.last_accessed
        return resource.last_used

    def classify(
        self,
        resource: Resource,
        history: UsageHistory | None,
        options: PruneOptions,
    ) -> PruneCandidate | None:
        """Classify one resource.

        Args:
            resource: Resource to judge
            history: Usage history for the resource, if any is known
            options: Filters for this invocation

        Returns:
            PruneCandidate, or None when the resource is excluded
        """
        if not resource.id or not isinstance(resource.type, ResourceType) or resource.size is None:
            self._exclude(resource, Exclusion.UNCLASSIFIABLE)
            return None
        last_use = self.last_use(resource, history)
        if last_use is None:
            self._exclude(resource, Exclusion.UNCLASSIFIABLE)
            return None

        if resource.in_use:
            self._exclude(resource, Exclusion.IN_USE)
            return None
        if resource.type is ResourceType.NETWORK and resource.name in BUILTIN_NETWORKS:
            self._exclude(resource, Exclusion.BUILTIN)
            return None
        if not options.includes(resource.type):
            self._exclude(resource, Exclusion.TYPE_FILTERED)
            return None
        # Force never overrides a pin.
        if matches_label(resource, options.exclude_labels):
            self._exclude(resource, Exclusion.PINNED)
            return None

        days_since_use = days_between(last_use, self.now)
        if days_since_use < options.older_than_days and not options.force:
            self._exclude(resource, Exclusion.TOO_RECENT)
            return None
        if resource.size < options.min_size_bytes:
            self._exclude(resource, Exclusion.TOO_SMALL)
            return None

        risk, reason = self._assess(resource, history)
        return PruneCandidate(
            resource=resource,
            reason=reason.value,
            days_since_use=days_since_use,
            risk_level=risk,
        )

    def _assess(self, resource: Resource, history: UsageHistory | None) -> tuple[RiskLevel, Reason]:
        if resource.type is ResourceType.VOLUME and not is_anonymous_volume(resource):
            return RiskLevel.HIGH, Reason.NAMED_VOLUME
        if resource.type in self.policy.high_risk_types:
            return RiskLevel.HIGH, Reason.HIGH_RISK_TYPE
        if history is None:
            return RiskLevel.MEDIUM, Reason.NO_HISTORY
        if days_between(history.last_accessed, self.now) < self.policy.safe_after_days:
            return RiskLevel.MEDIUM, Reason.RECENTLY_USED

        if resource.type is ResourceType.IMAGE and is_dangling_image(resource):
            return RiskLevel.SAFE, Reason.DANGLING_IMAGE
        if resource.type is ResourceType.CONTAINER:
            return RiskLevel.SAFE, Reason.STOPPED_CONTAINER
        if resource.type is ResourceType.VOLUME:
            return RiskLevel.SAFE, Reason.ANONYMOUS_VOLUME
        return RiskLevel.MEDIUM, Reason.IDLE


def classify_resources(
    resources: Iterable[Resource],
    options: PruneOptions,
    store: HistoryStore | None = None,
    policy: ClassifierPolicy | None = None,
    now: datetime | None = None,
) -> ClassificationResult:
    """Classify a batch of resources.

    Args:
        resources: Resources from the daemon
        options: Filters for this invocation
        store: Optional history store consulted per resource
        policy: Risk thresholds
        now: Reference time for age calculations

    Returns:
        ClassificationResult with candidates sorted by risk then size
    """
    classifier = SafetyClassifier(policy, now)
    candidates = []
    total = 0
    for resource in resources:
        total += 1
        history = store.get_usage_history(resource.id) if store and resource.id else None
        candidate = classifier.classify(resource, history, options)
        if candidate is not None:
            candidates.append(candidate)

    candidates.sort(key=lambda c: (c.risk_level.rank, -c.size, c.id))
    logger.info(
        "Classified %d resources: %d candidates, %d excluded",
        total,
        len(candidates),
        sum(classifier.exclusions.values()),
    )
    return ClassificationResult(
        candidates=candidates,
        total_resources=total,
        exclusions=classifier.exclusions,
    )
