"""Shared fixtures for backup_rotate tests.

All ages are measured against a fixed clock so that tier thresholds and
calendar windows are deterministic.
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List

import pytest

from backup_rotate.logger import create_logger
from backup_rotate.rotation import ArtifactStore, RetentionPolicy, RotationEngine

# Sunday 2024-10-20 12:00 local time (ISO week 42)
NOW = datetime(2024, 10, 20, 12, 0, 0).timestamp()
DAY = 86400


def days_ago(days: float) -> float:
    return NOW - days * DAY


def tier_names(target_dir: Path, period: str) -> List[str]:
    directory = target_dir / period
    if not directory.is_dir():
        return []
    return sorted(p.name for p in directory.iterdir())


@pytest.fixture
def clock() -> Callable[[], float]:
    return lambda: NOW


@pytest.fixture
def quiet_logger():
    return create_logger(name="backup-rotate-test", console=False)


@pytest.fixture
def policy() -> RetentionPolicy:
    return RetentionPolicy.default()


@pytest.fixture
def store(policy, clock, quiet_logger) -> ArtifactStore:
    return ArtifactStore(policy, clock=clock, logger=quiet_logger)


@pytest.fixture
def engine(policy, store, quiet_logger) -> RotationEngine:
    return RotationEngine(policy, store, logger=quiet_logger)


@pytest.fixture
def backup_root(tmp_path: Path) -> Path:
    root = tmp_path / "backups"
    root.mkdir()
    return root


@pytest.fixture
def target_dir(backup_root: Path) -> Path:
    path = backup_root / "host1" / "databases" / "db1"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def make_artifact() -> Callable[..., Path]:
    """Create ``<target_dir>/<period>/<name>`` with the given mtime."""

    def _make(target_dir: Path, period: str, name: str, mtime: float) -> Path:
        path = target_dir / period / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"backup")
        os.utime(path, (mtime, mtime))
        return path

    return _make


@pytest.fixture
def config_data(backup_root: Path) -> Dict:
    return {
        "BACKUP_DIR": str(backup_root),
        "hosts": {
            "host1": {
                "hostname": "host1.example.com",
                "databases": {
                    "db1": {"ssh_user": "backup"},
                    "db2": {"ssh_user": "backup", "extra_opts": "--single-transaction"},
                },
                "files": {
                    "www": {"ssh_user": "backup", "base_dir": "/var", "directories": ["www"]},
                },
            },
            "host2": {"hostname": "host2.example.com"},
        },
    }


@pytest.fixture
def config_file(tmp_path: Path, config_data: Dict) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config_data))
    return path


@pytest.fixture
def run_dir(tmp_path: Path) -> Path:
    path = tmp_path / "run"
    path.mkdir()
    return path
