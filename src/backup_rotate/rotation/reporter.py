"""Freshness report: age of the newest backup of every declared target."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from backup_rotate.exceptions import DirectoryUnavailableError
from backup_rotate.logger import Logger, get_logger

from .policy import RetentionPolicy
from .store import ArtifactStore
from .targets import BackupTarget, TargetEnumerator

ABSENT = "-"


@dataclass(frozen=True)
class TargetAge:
    """Age in seconds of a target's newest artifact; None when there is none.

    ``error`` is set when the target's tier could not be read.
    """

    target: BackupTarget
    age: Optional[int]
    error: Optional[DirectoryUnavailableError] = None

    @property
    def is_absent(self) -> bool:
        return self.age is None

    def format_line(self) -> str:
        """``host:kind:name:age`` with ``-`` for an unknown age."""
        return f"{self.target.label}:{ABSENT if self.age is None else self.age}"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "host": self.target.host,
            "kind": self.target.kind.value,
            "name": self.target.name,
            "extension": self.target.extension,
            "age": self.age,
        }
        if self.error is not None:
            data["error"] = self.error.to_dict()
        return data


class AgeReporter:
    """Reports the newest artifact age per target, from the finest tier only.

    A target whose tier cannot be read is reported as absent with its error;
    the other targets are still reported.
    """

    def __init__(
        self,
        enumerator: TargetEnumerator,
        store: ArtifactStore,
        policy: RetentionPolicy,
        logger: Optional[Logger] = None,
    ):
        self.enumerator = enumerator
        self.store = store
        self.policy = policy
        self.logger = logger or get_logger()

    def list_ages(self) -> List[TargetAge]:
        finest = self.policy.first
        now = self.store.clock()
        ages = []

        for target in self.enumerator.declared():
            target_dir = target.path(self.enumerator.root)
            if not target_dir.is_dir():
                ages.append(TargetAge(target, None))
                continue

            try:
                latest = self.store.latest(target_dir, finest)
            except DirectoryUnavailableError as e:
                self.logger.error("Cannot read target", target=target.label, error=str(e))
                ages.append(TargetAge(target, None, error=e))
                continue

            ages.append(TargetAge(target, None if latest is None else int(latest.age(now))))

        return ages
