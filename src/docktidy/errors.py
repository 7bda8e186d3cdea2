"""Error taxonomy for docktidy."""

from docktidy.models import ResourceType


class DocktidyError(Exception):
    """Base class for errors raised by docktidy."""


class DaemonUnreachableError(DocktidyError):
    """The Docker daemon could not be reached or did not answer in time.

    Network failures and daemon-side errors are deliberately not told apart.
    """

    def __init__(self, operation: str, cause: Exception | str):
        self.operation = operation
        self.cause = cause
        super().__init__(f"docker {operation} failed: {cause}")


class FeatureNotImplementedError(DocktidyError):
    """The requested operation is not supported by this adapter."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"docker adapter: {operation} not implemented")


class RemovalError(DocktidyError):
    """Removing a single resource failed."""

    def __init__(self, resource_type: ResourceType, resource_id: str, cause: Exception | str):
        self.resource_type = resource_type
        self.resource_id = resource_id
        self.cause = cause
        super().__init__(f"remove {resource_type.value} {resource_id}: {cause}")


class HistoryError(DocktidyError):
    """The history store failed to read or write."""
