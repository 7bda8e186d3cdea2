"""Fold raw `docker system df` listings into per-category usage rows."""

from collections.abc import Callable, Iterable
from typing import Any

from docktidy.models import DiskUsage, DiskUsageRow, RawUsage, UsageCategory

RawEntry = dict[str, Any] | None


def _int(entry: dict[str, Any], key: str) -> int:
    # The daemon reports -1 for sizes it has not computed.
    value = entry.get(key) or 0
    try:
        return max(int(value), 0)
    except (TypeError, ValueError, OverflowError):
        return 0


def aggregate_images(entries: Iterable[RawEntry]) -> DiskUsageRow:
    """Images are active while at least one container depends on them.

    Only the shared size of an unreferenced image counts as reclaimable.
    """
    total = active = size = reclaimable = 0
    for image in entries:
        if not isinstance(image, dict):
            continue
        total += 1
        containers = _int(image, "Containers")
        size += _int(image, "Size")
        if containers > 0:
            active += 1
        else:
            reclaimable += _int(image, "SharedSize")
    return DiskUsageRow(UsageCategory.IMAGES.value, total, active, size, min(reclaimable, size))


def aggregate_containers(entries: Iterable[RawEntry]) -> DiskUsageRow:
    """Containers are active while running; a stopped container's writable layer is reclaimable."""
    total = active = size = reclaimable = 0
    for container in entries:
        if not isinstance(container, dict):
            continue
        total += 1
        size_rw = _int(container, "SizeRw")
        size += size_rw
        if str(container.get("State") or "").lower() == "running":
            active += 1
        else:
            reclaimable += size_rw
    return DiskUsageRow(UsageCategory.CONTAINERS.value, total, active, size, reclaimable)


def aggregate_volumes(entries: Iterable[RawEntry]) -> DiskUsageRow:
    """Volumes are active while referenced.

    A volume without a usage sample is counted but contributes no size.
    """
    total = active = size = reclaimable = 0
    for volume in entries:
        if not isinstance(volume, dict):
            continue
        total += 1
        usage = volume.get("UsageData")
        if not isinstance(usage, dict):
            continue
        volume_size = _int(usage, "Size")
        size += volume_size
        if _int(usage, "RefCount") > 0:
            active += 1
        else:
            reclaimable += volume_size
    return DiskUsageRow(UsageCategory.VOLUMES.value, total, active, size, reclaimable)


def aggregate_build_cache(entries: Iterable[RawEntry]) -> DiskUsageRow:
    """Build cache records are active while flagged in use."""
    total = active = size = reclaimable = 0
    for record in entries:
        if not isinstance(record, dict):
            continue
        total += 1
        record_size = _int(record, "Size")
        size += record_size
        if record.get("InUse"):
            active += 1
        else:
            reclaimable += record_size
    return DiskUsageRow(UsageCategory.BUILD_CACHE.value, total, active, size, reclaimable)


AGGREGATORS: dict[UsageCategory, Callable[[Iterable[RawEntry]], DiskUsageRow]] = {
    UsageCategory.IMAGES: aggregate_images,
    UsageCategory.CONTAINERS: aggregate_containers,
    UsageCategory.VOLUMES: aggregate_volumes,
    UsageCategory.BUILD_CACHE: aggregate_build_cache,
}


def aggregate(category: UsageCategory, entries: Iterable[RawEntry] | None) -> DiskUsageRow:
    """Aggregate one category's raw listing into a usage row.

    Args:
        category: Which listing this is
        entries: Raw records as returned by the daemon, non-dict entries (None included) are skipped

    Returns:
        DiskUsageRow for the category
    """
    return AGGREGATORS[category](entries or ())


def summarize(raw: RawUsage) -> DiskUsage:
    """Build the full usage summary in display order."""
    listings = {
        UsageCategory.IMAGES: raw.images,
        UsageCategory.CONTAINERS: raw.containers,
        UsageCategory.VOLUMES: raw.volumes,
        UsageCategory.BUILD_CACHE: raw.build_cache,
    }
    return DiskUsage(rows=tuple(aggregate(category, listings[category]) for category in UsageCategory))
