"""Rotation service orchestrator.

Wires configuration, target discovery, the rotation engine and the age
reporter together, and runs rotation on a cron schedule for ``serve``.
"""

import signal
import time
from typing import Callable, List, Optional

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from backup_rotate.config import BackupSettings, RuntimeConfig, load_settings
from backup_rotate.exceptions import AlreadyRunningError
from backup_rotate.lock import RunLock
from backup_rotate.logger import Logger, get_logger
from backup_rotate.rotation import (
    AgeReporter,
    ArtifactStore,
    RetentionPolicy,
    RotationEngine,
    RotationResult,
    TargetAge,
    TargetEnumerator,
)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_ALL_FAILED = 2


def exit_code_for(result: RotationResult) -> int:
    """Non-zero only when every attempted target failed."""
    return EXIT_ALL_FAILED if result.all_failed else EXIT_OK


class RotationService:
    """Runs rotation and freshness listing over the configured targets."""

    def __init__(
        self,
        settings: BackupSettings,
        runtime: Optional[RuntimeConfig] = None,
        logger: Optional[Logger] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings
        self.runtime = runtime or RuntimeConfig()
        self.logger = logger or get_logger()
        self.policy = RetentionPolicy.from_settings(settings.retention)
        self.store = ArtifactStore(self.policy, clock=clock, logger=self.logger)
        self.enumerator = TargetEnumerator(settings)
        self.reporter = AgeReporter(self.enumerator, self.store, self.policy, logger=self.logger)
        self.scheduler: Optional[BlockingScheduler] = None
        self.shutdown_requested = False

    @classmethod
    def from_runtime(cls, runtime: RuntimeConfig, logger: Optional[Logger] = None) -> "RotationService":
        """Load the JSON configuration named by the runtime config."""
        return cls(load_settings(runtime.config_json), runtime=runtime, logger=logger)

    def lock(self, command: str) -> RunLock:
        return RunLock(self.runtime.run_dir, command)

    def rotate(self, dry_run: bool = False) -> RotationResult:
        """Rotate every existing target directory.

        Returns a result even when some artifacts or targets failed; the
        failures are in ``result.errors``.
        """
        self.logger.info(
            "Rotation started",
            backup_dir=str(self.settings.backup_dir),
            periods=",".join(self.policy.names),
            dry_run=dry_run,
        )

        scan = self.enumerator.scan()
        for target in scan.missing:
            self.logger.debug("No backups yet, skipping", target=target.label)
        for error in scan.unusable:
            self.logger.error("Target unusable", error=str(error))

        engine = RotationEngine(self.policy, self.store, logger=self.logger, dry_run=dry_run)
        result = engine.rotate(path for _, path in scan.present)
        result.unusable.extend(scan.unusable)

        if result.errors:
            self.logger.warning(
                "Rotation finished with errors",
                errors=len(result.errors),
                failed_targets=result.failed_count,
            )
        return result

    def list_ages(self) -> List[TargetAge]:
        return self.reporter.list_ages()

    def run_rotation_job(self) -> Optional[RotationResult]:
        """Scheduled job: rotate under the ``rotate`` lock."""
        if self.shutdown_requested:
            self.logger.info("Shutdown requested, skipping rotation")
            return None

        try:
            with self.lock("rotate"):
                return self.rotate()
        except AlreadyRunningError as e:
            self.logger.warning("Rotation skipped", reason=e.message)
            return None

    def setup_scheduler(self, schedule: Optional[str] = None) -> BlockingScheduler:
        schedule = schedule or self.runtime.schedule
        minute, hour, day, month, day_of_week = schedule.split()

        scheduler = BlockingScheduler()
        scheduler.add_job(
            self.run_rotation_job,
            trigger=CronTrigger(
                minute=minute,
                hour=hour,
                day=day,
                month=month,
                day_of_week=day_of_week,
            ),
            id="rotation_job",
            name="Scheduled Rotation",
            misfire_grace_time=3600,
            max_instances=1,
        )
        self.scheduler = scheduler
        self.logger.info("Rotation scheduled", schedule=schedule)
        return scheduler

    def handle_shutdown(self, signum, frame):
        self.logger.info("Received signal, shutting down", signal=signum)
        self.shutdown_requested = True
        if self.scheduler is not None and self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    def serve(self, schedule: Optional[str] = None) -> None:
        """Block and rotate on the cron schedule until SIGTERM/SIGINT."""
        signal.signal(signal.SIGTERM, self.handle_shutdown)
        signal.signal(signal.SIGINT, self.handle_shutdown)

        scheduler = self.setup_scheduler(schedule)
        self.logger.info("Rotation service started")
        try:
            scheduler.start()
        except (KeyboardInterrupt, SystemExit):
            pass
        self.logger.info("Rotation service stopped")

