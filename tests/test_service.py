"""Tests for the rotation service orchestrator."""

import json

import pytest
from apscheduler.schedulers.blocking import BlockingScheduler

from backup_rotate.config import RuntimeConfig, load_settings
from backup_rotate.rotation import RotationResult, TargetRotation
from backup_rotate.service import (
    EXIT_ALL_FAILED,
    EXIT_OK,
    RotationService,
    exit_code_for,
)

from conftest import days_ago, tier_names


@pytest.fixture
def service(config_file, run_dir, clock, quiet_logger):
    runtime = RuntimeConfig(config_json=config_file, run_dir=run_dir)
    return RotationService(load_settings(config_file), runtime=runtime, logger=quiet_logger, clock=clock)


class TestRotate:
    """Rotation across configured targets."""

    def test_rotates_existing_targets_only(self, service, target_dir, make_artifact):
        make_artifact(target_dir, "daily", "db1.sql.gz", days_ago(15))

        result = service.rotate()

        assert [t.target_dir for t in result.targets] == [target_dir]
        assert tier_names(target_dir, "weekly") == ["db1.sql.gz"]
        assert exit_code_for(result) == EXIT_OK

    def test_no_targets_on_disk(self, service):
        result = service.rotate()

        assert result.targets == []
        assert not result.all_failed

    def test_unusable_target_is_reported(self, service, backup_root, target_dir, make_artifact):
        make_artifact(target_dir, "daily", "db1.sql.gz", days_ago(1))
        (backup_root / "host1" / "files").mkdir()
        (backup_root / "host1" / "files" / "www").write_text("not a directory")

        result = service.rotate()

        assert len(result.unusable) == 1
        assert result.failed_count == 1
        assert not result.all_failed

    def test_dry_run_changes_nothing(self, service, target_dir, make_artifact):
        make_artifact(target_dir, "daily", "db1.sql.gz", days_ago(15))

        result = service.rotate(dry_run=True)

        assert result.dry_run
        assert result.promoted_count == 1
        assert tier_names(target_dir, "daily") == ["db1.sql.gz"]

    def test_custom_retention(self, config_data, config_file, run_dir, clock, quiet_logger,
                              target_dir, make_artifact):
        config_data["retention"] = [
            {"name": "daily", "unit_seconds": 86400, "keep": 2},
            {"name": "weekly", "unit_seconds": 604800, "keep": 2, "granularity": "week"},
        ]
        config_file.write_text(json.dumps(config_data))
        service = RotationService(
            load_settings(config_file),
            runtime=RuntimeConfig(config_json=config_file, run_dir=run_dir),
            logger=quiet_logger,
            clock=clock,
        )
        make_artifact(target_dir, "daily", "db1.sql.gz", days_ago(3))

        service.rotate()

        assert service.policy.names == ("daily", "weekly")
        assert tier_names(target_dir, "weekly") == ["db1.sql.gz"]
        assert not (target_dir / "monthly").exists()


class TestListAges:
    def test_list_ages(self, service, target_dir, make_artifact):
        make_artifact(target_dir, "daily", "db1.sql.gz", days_ago(1))

        lines = [a.format_line() for a in service.list_ages()]

        assert lines == [
            "host1:databases:db1:86400",
            "host1:databases:db2:-",
            "host1:files:www:-",
        ]


class TestScheduledJob:
    """The scheduled job runs rotation under the rotate lock."""

    def test_job_rotates(self, service, target_dir, make_artifact):
        make_artifact(target_dir, "daily", "db1.sql.gz", days_ago(15))

        result = service.run_rotation_job()

        assert result is not None
        assert result.promoted_count == 1
        assert not service.lock("rotate").path.exists()

    def test_job_skipped_while_locked(self, service):
        with service.lock("rotate"):
            assert service.run_rotation_job() is None

    def test_job_skipped_after_shutdown(self, service):
        service.handle_shutdown(15, None)

        assert service.run_rotation_job() is None

    def test_setup_scheduler(self, service):
        scheduler = service.setup_scheduler("30 2 * * 1")

        assert isinstance(scheduler, BlockingScheduler)
        job = scheduler.get_job("rotation_job")
        assert job is not None
        assert job.max_instances == 1
        assert job.misfire_grace_time == 3600
        assert not scheduler.running

    def test_setup_scheduler_uses_runtime_schedule(self, service):
        scheduler = service.setup_scheduler()

        assert "hour='3'" in str(scheduler.get_job("rotation_job").trigger)


class TestExitCodes:
    def test_partial_failure_is_success(self, tmp_path):
        result = RotationResult(targets=[
            TargetRotation(tmp_path / "a"),
            TargetRotation(tmp_path / "b", aborted=True),
        ])
        assert exit_code_for(result) == EXIT_OK

    def test_every_target_failed(self, tmp_path):
        result = RotationResult(targets=[TargetRotation(tmp_path / "a", aborted=True)])
        assert exit_code_for(result) == EXIT_ALL_FAILED

    def test_nothing_attempted(self):
        assert exit_code_for(RotationResult()) == EXIT_OK
