"""Error taxonomy for mesh generation and deployment."""

from typing import Optional


class MeshError(Exception):
    """Base class for all mesh generator errors."""

    def __init__(self, message: str, host_id: Optional[str] = None):
        self.host_id = host_id
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        if self.host_id:
            return f"{self.host_id}: {message}"
        return message


class ToolUnavailable(MeshError):
    """The key generation capability cannot be invoked. Fatal for the run."""


class InvalidHostRecord(MeshError):
    """A host record is malformed or cannot be classified. Fatal for the run."""


class KeyStorageIO(MeshError):
    """Key material cannot be read from or written to durable storage."""


class DeploymentFailure(MeshError):
    """Uploading or installing a rendered config on one host failed."""
