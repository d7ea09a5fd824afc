"""Base exception classes for backup rotation.

All exceptions carry structured error information:
- code: Machine-readable error identifier
- message: Human-readable error description
- details: Additional context (paths, targets, underlying OS error)
"""

from typing import Any, Dict, Optional


class BackupRotateError(Exception):
    """Base exception for all backup rotation errors.

    Attributes:
        code: Machine-readable error code (e.g., "DIRECTORY_UNAVAILABLE")
        message: Human-readable error message
        details: Optional additional context for debugging/recovery
    """

    default_code = "BACKUP_ROTATE_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize error with structured information.

        Args:
            message: Human-readable error message
            code: Error code, defaults to the class default_code
            details: Optional additional context
        """
        self.code = code or self.default_code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.code}: {self.message} (details: {self.details})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "details": {k: str(v) for k, v in self.details.items()},
        }


class ConfigurationError(BackupRotateError):
    """Configuration is missing, invalid, or declares an unusable target."""

    default_code = "CONFIGURATION_MISSING"


class DirectoryUnavailableError(BackupRotateError):
    """A target or period directory cannot be created or read.

    Aborts rotation of the affected target only.
    """

    default_code = "DIRECTORY_UNAVAILABLE"


class ArtifactError(BackupRotateError):
    """Base for failures on a single artifact."""

    default_code = "ARTIFACT_ERROR"


class ArtifactMoveFailedError(ArtifactError):
    """Promotion of an artifact into the next period failed."""

    default_code = "ARTIFACT_MOVE_FAILED"


class ArtifactDeleteFailedError(ArtifactError):
    """An artifact that is present could not be removed."""

    default_code = "ARTIFACT_DELETE_FAILED"


class AlreadyRunningError(BackupRotateError):
    """Another live process holds the lock for this command."""

    default_code = "ALREADY_RUNNING"
