"""Typed error taxonomy for the keyword workbench."""


class WorkbenchError(Exception):
    """Base class for all workbench errors."""


class NodeNotFoundError(WorkbenchError, LookupError):
    """Raised when a node identifier is not present in the current tree."""

    def __init__(self, node_id: str) -> None:
        super().__init__(f"Node not found in keyword tree: {node_id!r}")
        self.node_id = node_id


class InvalidNodeError(WorkbenchError, ValueError):
    """Raised when a node exists but has the wrong level for the requested operation."""


class NoTreeError(WorkbenchError):
    """Raised when an operation needs a generated tree and none exists yet."""


class GenerationError(WorkbenchError):
    """Generation service failure (retryable, non-fatal)."""


class GenerationNetworkError(GenerationError):
    """Transport or provider API failure."""


class MalformedResponseError(GenerationError, ValueError):
    """Provider answered, but the payload could not be decoded into the expected shape."""


class AugmentationError(WorkbenchError):
    """Term augmentation failed for a single Level2 node."""

    def __init__(self, node_id: str, message: str) -> None:
        super().__init__(f"Augmentation failed for {node_id}: {message}")
        self.node_id = node_id
        self.message = message


class AugmentationInProgressError(WorkbenchError):
    """A term augmentation request for this node is already outstanding."""

    def __init__(self, node_id: str) -> None:
        super().__init__(f"Augmentation already in progress for node {node_id!r}")
        self.node_id = node_id


class TranslationError(WorkbenchError):
    """Batch translation failed; no overlay entries were applied."""


class SaveValidationError(WorkbenchError, ValueError):
    """Save request rejected locally before any persistence call."""


class PersistenceError(WorkbenchError):
    """Persistence service failure. The message is surfaced verbatim."""
