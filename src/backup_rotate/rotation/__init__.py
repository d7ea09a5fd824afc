"""Tiered retention of backup artifacts.

Usage:
    from backup_rotate.rotation import (
        ArtifactStore, RetentionPolicy, RotationEngine, TargetEnumerator,
    )

    policy = RetentionPolicy.default()
    store = ArtifactStore(policy)
    engine = RotationEngine(policy, store)
    result = engine.rotate(path for _, path in TargetEnumerator(settings).existing())
"""

from backup_rotate.rotation.engine import RotationEngine, RotationResult, TargetRotation
from backup_rotate.rotation.policy import (
    DEFAULT_PERIODS,
    Period,
    RetentionPolicy,
    Window,
    window_of,
)
from backup_rotate.rotation.reporter import ABSENT, AgeReporter, TargetAge
from backup_rotate.rotation.store import Artifact, ArtifactStore
from backup_rotate.rotation.targets import (
    BackupTarget,
    TargetEnumerator,
    TargetKind,
    TargetScan,
)

__all__ = [
    "Period",
    "RetentionPolicy",
    "DEFAULT_PERIODS",
    "Window",
    "window_of",
    "Artifact",
    "ArtifactStore",
    "RotationEngine",
    "RotationResult",
    "TargetRotation",
    "BackupTarget",
    "TargetKind",
    "TargetEnumerator",
    "TargetScan",
    "AgeReporter",
    "TargetAge",
    "ABSENT",
]
