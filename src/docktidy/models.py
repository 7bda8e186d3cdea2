"""Data models for docktidy."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ResourceType(str, Enum):
    """Kind of Docker resource. Declaration order is the prune order."""

    CONTAINER = "container"
    IMAGE = "image"
    VOLUME = "volume"
    NETWORK = "network"


class UsageCategory(str, Enum):
    """Disk usage categories as reported by `docker system df`."""

    IMAGES = "Images"
    CONTAINERS = "Containers"
    VOLUMES = "Local Volumes"
    BUILD_CACHE = "Build Cache"


class RiskLevel(str, Enum):
    """How much caution removing a resource requires."""

    SAFE = "safe"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _RISK_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank >= other.rank


_RISK_ORDER = [RiskLevel.SAFE, RiskLevel.MEDIUM, RiskLevel.HIGH]


@dataclass(frozen=True)
class RawUsage:
    """Raw per-category listings from the daemon, entries may be None."""

    images: list[dict[str, Any] | None] = field(default_factory=list)
    containers: list[dict[str, Any] | None] = field(default_factory=list)
    volumes: list[dict[str, Any] | None] = field(default_factory=list)
    build_cache: list[dict[str, Any] | None] = field(default_factory=list)


@dataclass(frozen=True)
class Resource:
    """A single Docker object as observed at fetch time."""

    id: str
    type: ResourceType
    name: str = ""
    size: int | None = 0
    created_at: datetime | None = None
    last_used: datetime | None = None
    in_use: bool = False
    labels: dict[str, str] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)

    @property
    def size_human(self) -> str:
        """Return human-readable size."""
        return format_size(self.size or 0)

    @property
    def short_id(self) -> str:
        resource_id = self.id.split(":", 1)[-1]
        return resource_id[:12]


@dataclass(frozen=True)
class DiskUsageRow:
    """Aggregated disk usage for one category."""

    type: str
    total: int = 0
    active: int = 0
    size_bytes: int = 0
    reclaimable_bytes: int = 0

    @property
    def reclaimable_percent(self) -> float:
        if not self.size_bytes:
            return 0.0
        return self.reclaimable_bytes * 100 / self.size_bytes


@dataclass(frozen=True)
class DiskUsage:
    """Usage rows in display order: Images, Containers, Local Volumes, Build Cache."""

    rows: tuple[DiskUsageRow, ...] = ()

    @property
    def size_bytes(self) -> int:
        return sum(row.size_bytes for row in self.rows)

    @property
    def reclaimable_bytes(self) -> int:
        return sum(row.reclaimable_bytes for row in self.rows)


@dataclass(frozen=True)
class PruneCandidate:
    """A resource provisionally selected for removal."""

    resource: Resource
    reason: str
    days_since_use: int
    risk_level: RiskLevel

    @property
    def id(self) -> str:
        return self.resource.id

    @property
    def type(self) -> ResourceType:
        return self.resource.type

    @property
    def size(self) -> int:
        return self.resource.size or 0


@dataclass(frozen=True)
class PruneOptions:
    """Knobs for one classify/prune invocation."""

    dry_run: bool = True
    force: bool = False
    older_than_days: int = 0
    include_types: frozenset[ResourceType] = frozenset()
    exclude_labels: frozenset[str] = frozenset()
    min_size_bytes: int = 0

    def includes(self, resource_type: ResourceType) -> bool:
        """Empty include_types means every type."""
        return not self.include_types or resource_type in self.include_types


@dataclass
class PruneError:
    """Failure to remove one resource."""

    resource_type: ResourceType
    resource_id: str
    message: str

    def __str__(self) -> str:
        return f"{self.resource_type.value} {self.resource_id}: {self.message}"


@dataclass
class PruneResult:
    """Outcome of a prune batch. Partial success is normal."""

    resources_pruned: int = 0
    space_reclaimed: int = 0
    errors: list[PruneError] = field(default_factory=list)
    dry_run: bool = False

    @property
    def failed(self) -> int:
        return len(self.errors)


@dataclass
class UsageHistory:
    """When a resource was last seen in use, and how often."""

    resource_id: str
    resource_type: ResourceType
    last_accessed: datetime
    access_count: int = 0


@dataclass
class PruneHistory:
    """Journal entry for one prune batch."""

    id: str
    timestamp: datetime
    result: PruneResult
    options: PruneOptions


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole days from earlier to later, never negative."""
    return max((later - earlier).days, 0)


def format_size(bytes_size: int) -> str:
    """Format bytes as human-readable string."""
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if bytes_size < 1024:
            return f"{bytes_size:.1f} {unit}"
        bytes_size /= 1024
    return f"{bytes_size:.1f} PB"
