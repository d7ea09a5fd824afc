"""backup-rotate - tiered retention for database and file backups.

Backups of remote databases and file trees are stored as
``<BACKUP_DIR>/<host>/{databases|files}/<name>/<period>/<file>``. This package
keeps a bounded number of daily, weekly, monthly and yearly snapshots per
target by promoting or deleting artifacts as they age.

- rotation: retention policy, artifact store, rotation engine, age reporter
- config: JSON backup configuration and environment runtime options
- logger: structured logging with console, file and syslog output
- exceptions: structured error classes
- lock: process-singleton lock files
- service / cli: orchestration, scheduling and the ``backup-rotate`` command
"""

__version__ = "1.0.0"

from backup_rotate.config import (
    BackupSettings,
    RuntimeConfig,
    load_settings,
)

from backup_rotate.exceptions import (
    AlreadyRunningError,
    ArtifactDeleteFailedError,
    ArtifactMoveFailedError,
    BackupRotateError,
    ConfigurationError,
    DirectoryUnavailableError,
)

from backup_rotate.logger import (
    Logger,
    StructuredLogger,
    create_logger,
    get_logger,
)

from backup_rotate.rotation import (
    AgeReporter,
    Artifact,
    ArtifactStore,
    BackupTarget,
    Period,
    RetentionPolicy,
    RotationEngine,
    RotationResult,
    TargetAge,
    TargetEnumerator,
    TargetKind,
)

__all__ = [
    "__version__",
    # Config
    "BackupSettings",
    "RuntimeConfig",
    "load_settings",
    # Exceptions
    "BackupRotateError",
    "ConfigurationError",
    "DirectoryUnavailableError",
    "ArtifactMoveFailedError",
    "ArtifactDeleteFailedError",
    "AlreadyRunningError",
    # Logger
    "Logger",
    "StructuredLogger",
    "create_logger",
    "get_logger",
    # Rotation
    "Period",
    "RetentionPolicy",
    "Artifact",
    "ArtifactStore",
    "RotationEngine",
    "RotationResult",
    "BackupTarget",
    "TargetKind",
    "TargetEnumerator",
    "AgeReporter",
    "TargetAge",
]
