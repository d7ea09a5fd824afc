"""Backup targets declared in configuration and found on disk."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Tuple

from backup_rotate.config.settings import BackupSettings
from backup_rotate.exceptions import ConfigurationError


class TargetKind(str, Enum):
    """Kind of backed-up item; the value is its directory name."""

    DATABASES = "databases"
    FILES = "files"

    @property
    def extension(self) -> str:
        return "sql.gz" if self is TargetKind.DATABASES else "tar.gz"


@dataclass(frozen=True, order=True)
class BackupTarget:
    """A (host, kind, name) unit of backup."""

    host: str
    kind: TargetKind
    name: str

    @property
    def label(self) -> str:
        return f"{self.host}:{self.kind.value}:{self.name}"

    @property
    def extension(self) -> str:
        return self.kind.extension

    def path(self, root: Path) -> Path:
        return Path(root) / self.host / self.kind.value / self.name

    def __str__(self) -> str:
        return self.label


@dataclass
class TargetScan:
    """Declared targets split by what exists under the backup root."""

    present: List[Tuple[BackupTarget, Path]] = field(default_factory=list)
    missing: List[BackupTarget] = field(default_factory=list)
    unusable: List[ConfigurationError] = field(default_factory=list)


class TargetEnumerator:
    """Cross-references configured targets with the backup tree."""

    def __init__(self, settings: BackupSettings):
        self.settings = settings

    @property
    def root(self) -> Path:
        return Path(self.settings.backup_dir)

    def declared(self) -> List[BackupTarget]:
        """All configured targets: hosts by name, databases before files."""
        targets = []
        for host in sorted(self.settings.hosts):
            host_settings = self.settings.hosts[host]
            for name in sorted(host_settings.databases):
                targets.append(BackupTarget(host, TargetKind.DATABASES, name))
            for name in sorted(host_settings.files):
                targets.append(BackupTarget(host, TargetKind.FILES, name))
        return targets

    def scan(self) -> TargetScan:
        """Classify declared targets.

        Targets without a directory have not been backed up yet and are
        skipped; a path that exists but is not a directory is unusable.
        """
        result = TargetScan()
        for target in self.declared():
            path = target.path(self.root)
            if path.is_dir():
                result.present.append((target, path))
            elif path.exists():
                result.unusable.append(
                    ConfigurationError(
                        f"Target {target.label} is not a directory: {path}",
                        details={"target": target.label, "path": path},
                    )
                )
            else:
                result.missing.append(target)
        return result

    def existing(self) -> List[Tuple[BackupTarget, Path]]:
        return self.scan().present
