"""Rotation engine: age-driven promotion and deletion of backup artifacts.

For every target directory, periods are walked finest first and each tier is
scanned oldest first:

- an artifact within its tier's max age ends the scan of that tier, since
  everything after it is younger;
- an older artifact is promoted into the next period unless that period
  already holds an artifact from the same calendar window, in which case it
  is deleted;
- in the last period, an older artifact is deleted.

Artifacts promoted during a pass are resident in the next tier when that
tier is scanned, so a very old artifact can move through several tiers in
one pass. Failures are isolated: an artifact that cannot be moved or deleted
is recorded and skipped, and a target whose directories are unusable is
aborted without affecting the others.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from backup_rotate.exceptions import (
    ArtifactError,
    BackupRotateError,
    ConfigurationError,
    DirectoryUnavailableError,
)
from backup_rotate.logger import Logger, get_logger

from .policy import Period, RetentionPolicy, Window
from .store import Artifact, ArtifactStore

SECONDS_PER_DAY = 86400


@dataclass
class TargetRotation:
    """Outcome of rotating one target directory."""

    target_dir: Path
    promoted: List[Artifact] = field(default_factory=list)
    deleted: List[Artifact] = field(default_factory=list)
    errors: List[BackupRotateError] = field(default_factory=list)
    aborted: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target_dir": str(self.target_dir),
            "promoted": [str(a.path) for a in self.promoted],
            "deleted": [str(a.path) for a in self.deleted],
            "errors": [e.to_dict() for e in self.errors],
            "aborted": self.aborted,
        }


@dataclass
class RotationResult:
    """Aggregated outcome of a rotation run.

    ``promoted`` artifacts carry the path they were moved *from*.
    """

    targets: List[TargetRotation] = field(default_factory=list)
    unusable: List[ConfigurationError] = field(default_factory=list)
    dry_run: bool = False

    @property
    def promoted_count(self) -> int:
        return sum(len(t.promoted) for t in self.targets)

    @property
    def deleted_count(self) -> int:
        return sum(len(t.deleted) for t in self.targets)

    @property
    def errors(self) -> List[BackupRotateError]:
        collected: List[BackupRotateError] = list(self.unusable)
        for target in self.targets:
            collected.extend(target.errors)
        return collected

    @property
    def failed_count(self) -> int:
        return len(self.unusable) + sum(1 for t in self.targets if t.aborted)

    @property
    def attempted_count(self) -> int:
        return len(self.unusable) + len(self.targets)

    @property
    def all_failed(self) -> bool:
        """True when targets were attempted and every one of them failed."""
        return self.attempted_count > 0 and self.failed_count == self.attempted_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dry_run": self.dry_run,
            "promoted": self.promoted_count,
            "deleted": self.deleted_count,
            "targets": [t.to_dict() for t in self.targets],
            "errors": [e.to_dict() for e in self.errors],
        }


class RotationEngine:
    """Applies a RetentionPolicy to target directories through an ArtifactStore.

    Not safe for concurrent use on the same target directory; callers hold
    the process lock for the duration of a run.

    Args:
        policy: Ordered periods with their age thresholds
        store: Filesystem primitives
        logger: Logger for per-artifact decisions
        dry_run: Decide and report without touching the filesystem
    """

    def __init__(
        self,
        policy: RetentionPolicy,
        store: ArtifactStore,
        logger: Optional[Logger] = None,
        dry_run: bool = False,
    ):
        self.policy = policy
        self.store = store
        self.logger = logger or get_logger()
        self.dry_run = dry_run

    def rotate(self, target_dirs: Iterable[Path]) -> RotationResult:
        """Rotate each target directory in turn."""
        result = RotationResult(dry_run=self.dry_run)
        for target_dir in target_dirs:
            result.targets.append(self.rotate_target(target_dir))

        self.logger.info(
            "Rotation complete",
            targets=len(result.targets),
            promoted=result.promoted_count,
            deleted=result.deleted_count,
            errors=len(result.errors),
            dry_run=self.dry_run,
        )
        return result

    def rotate_target(self, target_dir: Path) -> TargetRotation:
        target_dir = Path(target_dir)
        outcome = TargetRotation(target_dir=target_dir)
        # Dry run only: artifacts that would have been promoted, per period
        planned: Dict[str, List[Artifact]] = defaultdict(list)

        self.logger.debug("Rotating target", target=str(target_dir))
        try:
            if not self.dry_run:
                self.store.ensure_period_dirs(target_dir)
            for period in self.policy:
                self._rotate_tier(target_dir, period, outcome, planned)
        except DirectoryUnavailableError as e:
            outcome.aborted = True
            outcome.errors.append(e)
            self.logger.error("Target rotation aborted", target=str(target_dir), error=str(e))

        return outcome

    def _rotate_tier(
        self,
        target_dir: Path,
        period: Period,
        outcome: TargetRotation,
        planned: Dict[str, List[Artifact]],
    ) -> None:
        next_period = self.policy.next(period)

        for artifact in self._snapshot(target_dir, period, planned):
            age = self.store.age(artifact)
            if age <= period.max_age:
                break

            try:
                if next_period is None:
                    self._delete(artifact, outcome, age, "end of retention chain")
                    continue

                window = next_period.window(artifact.mtime)
                if self._window_taken(target_dir, next_period, window, planned):
                    self._delete(artifact, outcome, age, f"{next_period.name} window {window} taken")
                else:
                    self._promote(artifact, next_period, outcome, age, planned)
            except ArtifactError as e:
                outcome.errors.append(e)
                self.logger.error("Artifact rotation failed", artifact=str(artifact.path), error=str(e))

    def _snapshot(
        self, target_dir: Path, period: Period, planned: Dict[str, List[Artifact]]
    ) -> List[Artifact]:
        artifacts = self.store.list(target_dir, period)
        if planned[period.name]:
            artifacts = sorted(artifacts + planned[period.name], key=lambda a: (a.mtime, a.name))
        return artifacts

    def _window_taken(
        self,
        target_dir: Path,
        period: Period,
        window: Window,
        planned: Dict[str, List[Artifact]],
    ) -> bool:
        if any(period.window(a.mtime) == window for a in planned[period.name]):
            return True
        return self.store.has_artifact_in_window(target_dir, period, window)

    def _promote(
        self,
        artifact: Artifact,
        to_period: Period,
        outcome: TargetRotation,
        age: float,
        planned: Dict[str, List[Artifact]],
    ) -> None:
        if self.dry_run:
            moved = Artifact(
                artifact.path.parent.parent / to_period.name / artifact.name,
                to_period.name,
                artifact.mtime,
            )
            planned[to_period.name].append(moved)
        else:
            self.store.promote(artifact, to_period)

        outcome.promoted.append(artifact)
        self.logger.info(
            "Would promote artifact" if self.dry_run else "Promoted artifact",
            artifact=str(artifact.path),
            from_period=artifact.period,
            to_period=to_period.name,
            age_days=round(age / SECONDS_PER_DAY, 1),
        )

    def _delete(self, artifact: Artifact, outcome: TargetRotation, age: float, reason: str) -> None:
        if not self.dry_run and not self.store.delete(artifact):
            return

        outcome.deleted.append(artifact)
        self.logger.info(
            "Would delete artifact" if self.dry_run else "Deleted artifact",
            artifact=str(artifact.path),
            period=artifact.period,
            age_days=round(age / SECONDS_PER_DAY, 1),
            reason=reason,
        )
