"""Tests for target discovery."""

from pathlib import Path

from backup_rotate.config import load_settings
from backup_rotate.exceptions import ConfigurationError
from backup_rotate.rotation import BackupTarget, TargetEnumerator, TargetKind


class TestBackupTarget:
    """Tests for the BackupTarget value type."""

    def test_path_layout(self):
        target = BackupTarget("host1", TargetKind.DATABASES, "db1")
        assert target.path(Path("/srv/backups")) == Path("/srv/backups/host1/databases/db1")

    def test_label(self):
        assert BackupTarget("host1", TargetKind.FILES, "www").label == "host1:files:www"

    def test_extension_by_kind(self):
        assert BackupTarget("h", TargetKind.DATABASES, "n").extension == "sql.gz"
        assert BackupTarget("h", TargetKind.FILES, "n").extension == "tar.gz"

    def test_hashable_and_frozen(self):
        a = BackupTarget("h", TargetKind.FILES, "n")
        b = BackupTarget("h", TargetKind.FILES, "n")
        assert {a, b} == {a}


class TestTargetEnumerator:
    """Cross-referencing configuration with the backup tree."""

    def test_declared_order(self, config_file):
        enumerator = TargetEnumerator(load_settings(config_file))

        labels = [t.label for t in enumerator.declared()]

        assert labels == ["host1:databases:db1", "host1:databases:db2", "host1:files:www"]

    def test_only_existing_directories(self, config_file, backup_root):
        (backup_root / "host1" / "databases" / "db2").mkdir(parents=True)
        (backup_root / "host1" / "files" / "www").mkdir(parents=True)
        enumerator = TargetEnumerator(load_settings(config_file))

        present = enumerator.existing()

        assert [t.label for t, _ in present] == ["host1:databases:db2", "host1:files:www"]
        assert present[0][1] == backup_root / "host1" / "databases" / "db2"

    def test_missing_host_is_skipped_silently(self, config_file):
        scan = TargetEnumerator(load_settings(config_file)).scan()

        assert scan.present == []
        assert scan.unusable == []
        assert len(scan.missing) == 3

    def test_file_in_place_of_directory_is_unusable(self, config_file, backup_root):
        (backup_root / "host1" / "databases").mkdir(parents=True)
        (backup_root / "host1" / "databases" / "db1").write_text("oops")

        scan = TargetEnumerator(load_settings(config_file)).scan()

        assert len(scan.unusable) == 1
        assert isinstance(scan.unusable[0], ConfigurationError)
        assert scan.unusable[0].details["target"] == "host1:databases:db1"
