"""Configuration for backup rotation.

Two layers:
- BackupSettings: what is backed up, loaded from the JSON file
- RuntimeConfig: how this process runs, loaded from the environment

Example:
    from backup_rotate.config import RuntimeConfig, load_settings

    runtime = RuntimeConfig.from_env()
    settings = load_settings(runtime.config_json)
"""

from backup_rotate.config.env_loader import EnvLoader
from backup_rotate.config.runtime import (
    DEFAULT_PREFIX,
    DEFAULT_RUN_DIR,
    DEFAULT_SCHEDULE,
    RuntimeConfig,
)
from backup_rotate.config.settings import (
    BackupSettings,
    DatabaseSettings,
    FileGroupSettings,
    HostSettings,
    PeriodSettings,
    load_settings,
)

__all__ = [
    "EnvLoader",
    "RuntimeConfig",
    "DEFAULT_PREFIX",
    "DEFAULT_RUN_DIR",
    "DEFAULT_SCHEDULE",
    "BackupSettings",
    "HostSettings",
    "DatabaseSettings",
    "FileGroupSettings",
    "PeriodSettings",
    "load_settings",
]
