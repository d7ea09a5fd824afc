"""Process-singleton lock files.

One lock per (command, target): ``rotate.lock``, ``list.lock`` or
``backup-<host>.lock`` in the run directory. The file is created exclusively
and records the owner's pid, so a lock left behind by a dead process can be
recognised and replaced.

Usage:
    with RunLock(run_dir, "rotate"):
        service.rotate()
"""

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import psutil

from backup_rotate.exceptions import AlreadyRunningError, ConfigurationError


class RunLock:
    """Exclusive lock file for one command (and optionally one target)."""

    def __init__(self, run_dir: Path, command: str, target: Optional[str] = None):
        self.run_dir = Path(run_dir)
        self.command = command
        self.target = target
        self._held = False

    @property
    def path(self) -> Path:
        name = f"{self.command}-{self.target}" if self.target else self.command
        return self.run_dir / f"{name}.lock"

    @property
    def held(self) -> bool:
        return self._held

    def _check_run_dir(self) -> None:
        if not self.run_dir.is_dir():
            raise ConfigurationError(
                f"Run dir does not exist: {self.run_dir}", details={"run_dir": self.run_dir}
            )
        if not os.access(self.run_dir, os.W_OK):
            raise ConfigurationError(
                f"Can not write to directory: {self.run_dir}", details={"run_dir": self.run_dir}
            )

    def read_owner(self) -> Optional[Dict[str, Any]]:
        """Metadata of the current lock file, None if absent or unreadable."""
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None

    def is_stale(self) -> bool:
        """True if the lock file belongs to a process that no longer runs."""
        owner = self.read_owner()
        if not owner or "pid" not in owner:
            return True
        try:
            return not psutil.pid_exists(int(owner["pid"]))
        except (TypeError, ValueError):
            return True

    def _create(self) -> None:
        fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump({"pid": os.getpid(), "ts": datetime.now(timezone.utc).isoformat()}, f)

    def acquire(self) -> None:
        """Take the lock.

        Raises:
            ConfigurationError: run dir missing or not writable
            AlreadyRunningError: another live process holds the lock
        """
        self._check_run_dir()
        try:
            self._create()
        except FileExistsError:
            if not self.is_stale():
                raise AlreadyRunningError(
                    f"Command ({self.command}) already running",
                    details={"lock": self.path, "owner": self.read_owner()},
                ) from None
            self.path.unlink(missing_ok=True)
            try:
                self._create()
            except FileExistsError:
                # Another process replaced the stale lock first
                raise AlreadyRunningError(
                    f"Command ({self.command}) already running",
                    details={"lock": self.path},
                ) from None
        self._held = True

    def release(self) -> None:
        if self._held:
            self.path.unlink(missing_ok=True)
            self._held = False

    def __enter__(self) -> "RunLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
