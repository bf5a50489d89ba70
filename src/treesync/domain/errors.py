from __future__ import annotations

"""
Snapshot Error Taxonomy.

Defines the exceptions raised while turning a file tree into instance
snapshots. Filesystem failures are not wrapped: builtin OSError subclasses
propagate unchanged from the filesystem layer.
"""

# -----------------------------------------------------------------------------
# USER-FACING ERRORS
# -----------------------------------------------------------------------------

class SnapshotError(Exception):
    """Base class for recoverable, user-facing snapshot failures."""


class SnapshotNameError(SnapshotError):
    """Raised when an instance name cannot be derived from a path."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Could not extract file name from path: {path}")


class PathEncodingError(SnapshotError):
    """Raised when a path component is not valid text."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"File name was not valid UTF-8: {path!r}")


class MetadataError(SnapshotError):
    """
    Common base for sidecar metadata failures.

    Attributes:
        path: Filesystem path of the offending sidecar file.
        reason: Human readable description of the failure.
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{reason} (in {path})")


class MetadataParseError(MetadataError):
    """Raised when a sidecar file is not a well-formed metadata document."""


class MetadataValidationError(MetadataError):
    """Raised when a sidecar override does not fit the target instance."""

# -----------------------------------------------------------------------------
# INTERNAL CONSISTENCY ERRORS
# -----------------------------------------------------------------------------

class SchemaLookupError(RuntimeError):
    """
    Raised when the bundled reflection schema lacks a required enum or member.

    Signals a corrupted or version-mismatched schema. Not a SnapshotError
    subclass: handlers for user errors must not catch it.
    """
