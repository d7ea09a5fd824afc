"""Filesystem-backed artifact store.

Artifacts live at ``<target_dir>/<period>/<filename>``. Ordering and age come
from the file modification time only; filenames are never parsed.
"""

import os
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from backup_rotate.exceptions import (
    ArtifactDeleteFailedError,
    ArtifactMoveFailedError,
    DirectoryUnavailableError,
)
from backup_rotate.logger import Logger, get_logger

from .policy import Period, RetentionPolicy, Window


@dataclass(frozen=True)
class Artifact:
    """One backup file in one period directory."""

    path: Path
    period: str
    mtime: float

    @property
    def name(self) -> str:
        return self.path.name

    def age(self, now: float) -> float:
        return now - self.mtime


class ArtifactStore:
    """Listing, age, move and delete primitives over the backup tree.

    Args:
        policy: Periods whose directories are managed
        clock: Returns "now" as a POSIX timestamp (injectable for tests)
        logger: Logger for debug output
    """

    def __init__(
        self,
        policy: RetentionPolicy,
        clock: Callable[[], float] = time.time,
        logger: Optional[Logger] = None,
    ):
        self.policy = policy
        self.clock = clock
        self.logger = logger or get_logger()

    @staticmethod
    def period_dir(target_dir: Path, period: Period) -> Path:
        return Path(target_dir) / period.name

    def list(self, target_dir: Path, period: Period) -> List[Artifact]:
        """Artifacts of one tier, oldest first by (mtime, filename).

        A missing tier directory is an empty tier.

        Raises:
            DirectoryUnavailableError: the directory exists but cannot be read
        """
        directory = self.period_dir(target_dir, period)
        artifacts = []

        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    try:
                        if not entry.is_file(follow_symlinks=False):
                            continue
                        mtime = entry.stat(follow_symlinks=False).st_mtime
                    except FileNotFoundError:
                        # Removed between listing and stat
                        continue
                    artifacts.append(Artifact(Path(entry.path), period.name, mtime))
        except FileNotFoundError:
            return []
        except OSError as e:
            raise DirectoryUnavailableError(
                f"Cannot read period directory {directory}",
                details={"path": directory, "error": e},
            ) from e

        artifacts.sort(key=lambda a: (a.mtime, a.name))
        return artifacts

    def age(self, artifact: Artifact) -> float:
        """Seconds since the artifact was last modified."""
        return artifact.age(self.clock())

    def ensure_period_dirs(self, target_dir: Path) -> None:
        """Create every period directory below target_dir (idempotent).

        Raises:
            DirectoryUnavailableError: a directory cannot be created
        """
        for period in self.policy:
            directory = self.period_dir(target_dir, period)
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise DirectoryUnavailableError(
                    f"Cannot create period directory {directory}",
                    details={"path": directory, "error": e},
                ) from e

    def promote(self, artifact: Artifact, to_period: Period) -> Artifact:
        """Move an artifact into another period, keeping name and mtime.

        The move is a rename on the same filesystem and a copy plus delete
        across filesystems.

        Raises:
            ArtifactMoveFailedError: destination exists or the move failed
        """
        destination = artifact.path.parent.parent / to_period.name / artifact.name

        if destination.exists():
            raise ArtifactMoveFailedError(
                f"Cannot promote {artifact.name}: {destination} already exists",
                details={"source": artifact.path, "destination": destination},
            )

        try:
            shutil.move(str(artifact.path), str(destination))
        except OSError as e:
            raise ArtifactMoveFailedError(
                f"Failed to promote {artifact.name} from {artifact.period} to {to_period.name}",
                details={"source": artifact.path, "destination": destination, "error": e},
            ) from e

        self.logger.debug("Moved artifact", source=str(artifact.path), destination=str(destination))
        return Artifact(destination, to_period.name, artifact.mtime)

    def delete(self, artifact: Artifact) -> bool:
        """Remove an artifact; returns False if it was already gone.

        Raises:
            ArtifactDeleteFailedError: the file exists but cannot be removed
        """
        try:
            artifact.path.unlink()
        except FileNotFoundError:
            self.logger.debug("Artifact already removed", artifact=str(artifact.path))
            return False
        except OSError as e:
            raise ArtifactDeleteFailedError(
                f"Failed to delete {artifact.name}",
                details={"path": artifact.path, "error": e},
            ) from e
        return True

    def has_artifact_in_window(self, target_dir: Path, period: Period, window: Window) -> bool:
        """True if ``period`` already holds an artifact in ``window``.

        The window is computed with ``period``'s granularity from each
        resident artifact's mtime.
        """
        return any(period.window(a.mtime) == window for a in self.list(target_dir, period))

    def latest(self, target_dir: Path, period: Period) -> Optional[Artifact]:
        """Most recently modified artifact of a tier, or None if empty."""
        artifacts = self.list(target_dir, period)
        return artifacts[-1] if artifacts else None
