"""Daemon health and usage snapshot for the dashboard."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from docktidy import text as txt
from docktidy.aggregator import summarize
from docktidy.errors import DocktidyError
from docktidy.models import DiskUsage
from docktidy.utils.daemon import DockerService

logger = logging.getLogger(__name__)


class StatusLevel(str, Enum):
    UNKNOWN = "unknown"
    HEALTHY = "healthy"
    DEGRADED = "degraded"


@dataclass
class StatusMessage:
    message: str
    level: StatusLevel = StatusLevel.UNKNOWN


def docker_status_and_usage(
    service_factory: Callable[[], DockerService] = DockerService,
    text: txt.Text | None = None,
) -> tuple[StatusMessage, DiskUsage | None]:
    """Ping the daemon and summarize its disk usage.

    Any failure degrades the status and yields no usage data rather than a
    partial view.

    Args:
        service_factory: Builds the daemon adapter
        text: String table for the status message

    Returns:
        Tuple of (status, usage or None)
    """
    text = text or txt.default()
    try:
        service = service_factory()
        service.ping()
        usage = summarize(service.fetch_raw_usage())
    except DocktidyError as e:
        logger.warning("Docker daemon unreachable: %s", e)
        return (
            StatusMessage(f"{text.get(txt.KEY_DOCKER_STATUS_DEGRADED)} ({e})", StatusLevel.DEGRADED),
            None,
        )
    return StatusMessage(text.get(txt.KEY_DOCKER_STATUS_HEALTHY), StatusLevel.HEALTHY), usage
