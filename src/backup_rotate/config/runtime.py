"""Runtime configuration for a backup-rotate invocation.

Holds process-level options (where the JSON configuration lives, where lock
files go, how to log) that used to be ambient shell variables. Built from the
environment with ``RuntimeConfig.from_env`` and overridden by CLI flags.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

from backup_rotate.config.env_loader import EnvLoader
from backup_rotate.exceptions import ConfigurationError

DEFAULT_PREFIX = "BACKUP_ROTATE"
DEFAULT_CONFIG_JSON = Path.home() / "backup-sh-config.json"
DEFAULT_RUN_DIR = Path("/var/run/backup-sh")
DEFAULT_SCHEDULE = "0 3 * * *"

_ALLOWED_LOG_FORMATS = {"console", "json"}
_ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_TRUTHY = {"1", "true", "yes", "on"}


def _parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in _TRUTHY


@dataclass
class RuntimeConfig:
    """Process options for one run.

    Attributes:
        config_json: JSON file declaring BACKUP_DIR and hosts
        run_dir: Directory for lock files, must exist and be writable
        log_level: Logging level name
        log_format: "console" or "json"
        log_file: Optional log file
        syslog: Also log to syslog (facility local0)
        verbose: Echo log output on stderr
        no_log: Disable all log output
        schedule: Cron expression used by ``serve``
    """

    config_json: Path = field(default_factory=lambda: DEFAULT_CONFIG_JSON)
    run_dir: Path = field(default_factory=lambda: DEFAULT_RUN_DIR)
    log_level: str = "INFO"
    log_format: str = "console"
    log_file: Optional[str] = None
    syslog: bool = False
    verbose: bool = False
    no_log: bool = False
    schedule: str = DEFAULT_SCHEDULE

    @classmethod
    def from_env(
        cls,
        prefix: str = DEFAULT_PREFIX,
        env_file: Optional[Path] = None,
    ) -> "RuntimeConfig":
        """Load options from ``{prefix}_*`` variables (and an optional .env file).

        Environment variables:
            {prefix}_CONFIG_JSON, {prefix}_RUN_DIR, {prefix}_LOG_LEVEL,
            {prefix}_LOG_FORMAT, {prefix}_LOG_FILE, {prefix}_SYSLOG,
            {prefix}_SCHEDULE
        """
        env_data = EnvLoader(env_file).load_prefixed(prefix)

        return cls(
            config_json=Path(env_data.get("CONFIG_JSON") or DEFAULT_CONFIG_JSON).expanduser(),
            run_dir=Path(env_data.get("RUN_DIR") or DEFAULT_RUN_DIR),
            log_level=env_data.get("LOG_LEVEL", "INFO"),
            log_format=env_data.get("LOG_FORMAT", "console"),
            log_file=env_data.get("LOG_FILE") or None,
            syslog=_parse_bool(env_data.get("SYSLOG")),
            schedule=env_data.get("SCHEDULE", DEFAULT_SCHEDULE),
        )

    def __post_init__(self) -> None:
        self.config_json = Path(self.config_json)
        self.run_dir = Path(self.run_dir)
        self.log_level = self.log_level.upper()
        self.log_format = self.log_format.lower()
        self.validate()

    def validate(self) -> None:
        if self.log_format not in _ALLOWED_LOG_FORMATS:
            raise ConfigurationError(
                f"Invalid log format '{self.log_format}'. Expected one of {sorted(_ALLOWED_LOG_FORMATS)}.",
                details={"log_format": self.log_format},
            )

        if self.log_level not in _ALLOWED_LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level '{self.log_level}'.",
                details={"log_level": self.log_level},
            )

        if len(self.schedule.split()) != 5:
            raise ConfigurationError(
                "Schedule must be in cron format: 'minute hour day month weekday'",
                details={"schedule": self.schedule},
            )

    def with_overrides(self, **overrides: Any) -> "RuntimeConfig":
        """Copy with non-None overrides applied (CLI flags win over env)."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
