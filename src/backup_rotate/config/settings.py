"""Typed backup configuration loaded from JSON.

The JSON file declares the backup root and, per host, the databases and
file groups that get backed up. It is validated once at load time so the
rotation code never has to probe for missing keys.

Example:
    {
      "BACKUP_DIR": "/srv/backups",
      "hosts": {
        "web1": {
          "hostname": "web1.example.com",
          "databases": {"shop": {"ssh_user": "backup"}},
          "files": {"uploads": {"ssh_user": "backup", "base_dir": "/var/www",
                                "directories": ["uploads"]}}
        }
      }
    }
"""

import json
from pathlib import Path
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from backup_rotate.exceptions import ConfigurationError


def _check_path_component(value: str) -> str:
    if not value or value in {".", ".."} or "/" in value or "\\" in value:
        raise ValueError(f"'{value}' is not a valid directory name")
    return value


def _check_names(values: Dict[str, object]) -> Dict[str, object]:
    for name in values:
        _check_path_component(name)
    return values


class DatabaseSettings(BaseModel):
    """A database dumped with mysqldump over ssh."""

    ssh_user: str = Field(description="Remote user running mysqldump")
    extra_opts: Optional[str] = Field(default=None, description="Extra mysqldump options")


class FileGroupSettings(BaseModel):
    """A set of directories archived with tar over ssh."""

    ssh_user: str = Field(description="Remote user running tar")
    base_dir: str = Field(description="Directory tar changes into")
    directories: List[str] = Field(default_factory=list, description="Paths relative to base_dir")


class HostSettings(BaseModel):
    """One backed-up host; databases and files may both be absent."""

    hostname: str
    databases: Dict[str, DatabaseSettings] = Field(default_factory=dict)
    files: Dict[str, FileGroupSettings] = Field(default_factory=dict)

    @field_validator("databases", "files")
    @classmethod
    def validate_target_names(cls, v: Dict[str, object]) -> Dict[str, object]:
        return _check_names(v)


class PeriodSettings(BaseModel):
    """Override for one retention period."""

    name: str
    unit_seconds: int = Field(ge=1, description="Length of one period in seconds")
    keep: int = Field(ge=1, description="Periods kept before leaving the tier")
    granularity: Optional[Literal["day", "week", "month", "year"]] = Field(
        default=None,
        description="Calendar window used when promoting into this period",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _check_path_component(v)


class BackupSettings(BaseModel):
    """Root of the JSON configuration."""

    model_config = ConfigDict(populate_by_name=True)

    backup_dir: Path = Field(alias="BACKUP_DIR", description="Root of all backup artifacts")
    hosts: Dict[str, HostSettings] = Field(default_factory=dict)
    retention: Optional[List[PeriodSettings]] = Field(
        default=None,
        description="Ordered periods, finest first; default policy when omitted",
    )

    @field_validator("hosts")
    @classmethod
    def validate_host_names(cls, v: Dict[str, HostSettings]) -> Dict[str, HostSettings]:
        return _check_names(v)  # type: ignore[return-value]


def load_settings(path: Path) -> BackupSettings:
    """Read and validate the JSON configuration.

    Raises:
        ConfigurationError: file missing, unreadable, not JSON, or invalid
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(
            f"Configuration file not found at: {path}", details={"path": path}
        )

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(
            f"Configuration file not readable: {path}", details={"path": path, "error": e}
        ) from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Configuration file is not valid JSON: {path}",
            details={"path": path, "error": e},
        ) from e

    try:
        return BackupSettings.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration in {path}",
            details={"path": path, "errors": e.errors(include_url=False)},
        ) from e
