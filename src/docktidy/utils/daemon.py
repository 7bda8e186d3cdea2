"""Docker daemon adapter for docktidy."""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

import docker
import requests
from dateutil import parser as dateparser
from docker.errors import DockerException

from docktidy.errors import DaemonUnreachableError, FeatureNotImplementedError, RemovalError
from docktidy.models import RawUsage, Resource, ResourceType

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5

TRANSPORT_ERRORS = (DockerException, requests.exceptions.RequestException)

# States in which the daemon refuses a plain container remove.
BUSY_CONTAINER_STATES = frozenset({"running", "paused", "restarting", "removing"})


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a daemon timestamp (unix seconds or RFC 3339) into an aware datetime.

    Docker reports the zero time (0001-01-01) for unknown values; those become None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        if value <= 0:
            return None
        return datetime.fromtimestamp(value, tz=timezone.utc)
    try:
        parsed = dateparser.isoparse(str(value))
    except (ValueError, OverflowError):
        return None
    if parsed.year <= 1:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _size(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return None


def image_to_resource(entry: dict[str, Any]) -> Resource:
    tags = [t for t in entry.get("RepoTags") or [] if t != "<none>:<none>"]
    image_id = entry.get("Id") or ""
    created = parse_timestamp(entry.get("Created"))
    return Resource(
        id=image_id,
        type=ResourceType.IMAGE,
        name=tags[0] if tags else image_id.split(":", 1)[-1][:12],
        size=_size(entry.get("Size")),
        created_at=created,
        last_used=created,
        in_use=(_size(entry.get("Containers")) or 0) > 0,
        labels=dict(entry.get("Labels") or {}),
        tags=tags,
    )


def container_to_resource(entry: dict[str, Any]) -> Resource:
    names = entry.get("Names") or []
    created = parse_timestamp(entry.get("Created"))
    return Resource(
        id=entry.get("Id") or "",
        type=ResourceType.CONTAINER,
        name=names[0].lstrip("/") if names else "",
        size=_size(entry.get("SizeRw")),
        created_at=created,
        last_used=created,
        in_use=str(entry.get("State") or "").lower() in BUSY_CONTAINER_STATES,
        labels=dict(entry.get("Labels") or {}),
        tags=[entry["Image"]] if entry.get("Image") else [],
    )


def volume_to_resource(entry: dict[str, Any]) -> Resource:
    usage = entry.get("UsageData")
    if not isinstance(usage, dict):
        usage = {}
    created = parse_timestamp(entry.get("CreatedAt"))
    return Resource(
        id=entry.get("Name") or "",
        type=ResourceType.VOLUME,
        name=entry.get("Name") or "",
        size=_size(usage.get("Size")) if usage else None,
        created_at=created,
        last_used=created,
        in_use=(_size(usage.get("RefCount")) or 0) > 0,
        labels=dict(entry.get("Labels") or {}),
    )


def network_to_resource(attrs: dict[str, Any]) -> Resource:
    created = parse_timestamp(attrs.get("Created"))
    return Resource(
        id=attrs.get("Id") or "",
        type=ResourceType.NETWORK,
        name=attrs.get("Name") or "",
        size=0,
        created_at=created,
        last_used=created,
        in_use=bool(attrs.get("Containers")),
        labels=dict(attrs.get("Labels") or {}),
    )


def _remove_container(client, resource_id: str) -> None:
    client.containers.get(resource_id).remove()


def _remove_image(client, resource_id: str) -> None:
    client.images.remove(image=resource_id)


def _remove_volume(client, resource_id: str) -> None:
    client.volumes.get(resource_id).remove()


def _remove_network(client, resource_id: str) -> None:
    client.networks.get(resource_id).remove()


REMOVERS = {
    ResourceType.CONTAINER: _remove_container,
    ResourceType.IMAGE: _remove_image,
    ResourceType.VOLUME: _remove_volume,
    ResourceType.NETWORK: _remove_network,
}


class DockerService:
    """Thin wrapper over the Docker SDK client.

    The client is created lazily so a missing daemon only surfaces when a
    call is made. Pass `client` to inject a fake in tests.
    """

    def __init__(self, client=None, timeout: int = DEFAULT_TIMEOUT):
        self._client = client
        self.timeout = timeout

    @property
    def client(self):
        if self._client is None:
            try:
                self._client = docker.from_env(timeout=self.timeout)
            except TRANSPORT_ERRORS as e:
                raise DaemonUnreachableError("connect", e) from e
        return self._client

    def ping(self) -> None:
        """Check the daemon answers.

        Raises:
            DaemonUnreachableError: On any failure or timeout
        """
        try:
            self.client.ping()
        except TRANSPORT_ERRORS as e:
            raise DaemonUnreachableError("ping", e) from e
        logger.debug("Docker daemon answered ping")

    def fetch_raw_usage(self) -> RawUsage:
        """Fetch the raw `system df` listings."""
        try:
            data = self.client.df()
        except TRANSPORT_ERRORS as e:
            raise DaemonUnreachableError("disk usage", e) from e
        data = data or {}
        return RawUsage(
            images=list(data.get("Images") or []),
            containers=list(data.get("Containers") or []),
            volumes=list(data.get("Volumes") or []),
            build_cache=list(data.get("BuildCache") or []),
        )

    def list_resources(self, types: Iterable[ResourceType] | None = None) -> list[Resource]:
        """List resources of the given types (all types when empty).

        Args:
            types: Resource types to list

        Returns:
            Resources in ResourceType order
        """
        wanted = set(types or ResourceType)
        resources: list[Resource] = []

        if wanted & {ResourceType.IMAGE, ResourceType.CONTAINER, ResourceType.VOLUME}:
            raw = self.fetch_raw_usage()
            if ResourceType.CONTAINER in wanted:
                resources += [container_to_resource(e) for e in raw.containers if isinstance(e, dict)]
            if ResourceType.IMAGE in wanted:
                resources += [image_to_resource(e) for e in raw.images if isinstance(e, dict)]
            if ResourceType.VOLUME in wanted:
                resources += [volume_to_resource(e) for e in raw.volumes if isinstance(e, dict)]

        if ResourceType.NETWORK in wanted:
            try:
                networks = self.client.networks.list(greedy=True)
            except TRANSPORT_ERRORS as e:
                raise DaemonUnreachableError("network list", e) from e
            resources += [network_to_resource(n.attrs) for n in networks]

        logger.debug("Listed %d resources", len(resources))
        return resources

    def remove_resource(self, resource_type: ResourceType, resource_id: str) -> None:
        """Remove one resource.

        Raises:
            FeatureNotImplementedError: If the type has no removal operation
            RemovalError: If the daemon refused or could not be reached
        """
        remover = REMOVERS.get(resource_type)
        if remover is None:
            raise FeatureNotImplementedError(f"remove {resource_type.value}")
        try:
            remover(self.client, resource_id)
        except (DaemonUnreachableError, *TRANSPORT_ERRORS) as e:
            raise RemovalError(resource_type, resource_id, e) from e
