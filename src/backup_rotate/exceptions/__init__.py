"""Exceptions for backup rotation.

Usage:
    from backup_rotate.exceptions import (
        BackupRotateError,
        ConfigurationError,
        DirectoryUnavailableError,
        ArtifactMoveFailedError,
        ArtifactDeleteFailedError,
    )
"""

from backup_rotate.exceptions.base import (
    AlreadyRunningError,
    ArtifactDeleteFailedError,
    ArtifactError,
    ArtifactMoveFailedError,
    BackupRotateError,
    ConfigurationError,
    DirectoryUnavailableError,
)

__all__ = [
    "BackupRotateError",
    "ConfigurationError",
    "DirectoryUnavailableError",
    "ArtifactError",
    "ArtifactMoveFailedError",
    "ArtifactDeleteFailedError",
    "AlreadyRunningError",
]
