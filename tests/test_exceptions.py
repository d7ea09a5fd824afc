"""Tests for the backup_rotate exception hierarchy.

These tests verify:
1. Exception structure (code, message, details)
2. Default codes per error class
3. Dictionary conversion for JSON output
"""

from pathlib import Path

import pytest

from backup_rotate.exceptions import (
    AlreadyRunningError,
    ArtifactDeleteFailedError,
    ArtifactError,
    ArtifactMoveFailedError,
    BackupRotateError,
    ConfigurationError,
    DirectoryUnavailableError,
)


class TestBackupRotateError:
    """Tests for the base class."""

    def test_basic_construction(self):
        error = BackupRotateError("Something broke")

        assert error.code == "BACKUP_ROTATE_ERROR"
        assert error.message == "Something broke"
        assert error.details == {}

    def test_explicit_code(self):
        error = BackupRotateError("Something broke", code="CUSTOM")
        assert error.code == "CUSTOM"

    def test_str_without_details(self):
        assert str(BackupRotateError("Test message")) == "BACKUP_ROTATE_ERROR: Test message"

    def test_str_with_details(self):
        error = BackupRotateError("Test message", details={"target": "h:files:www"})

        result = str(error)
        assert "Test message" in result
        assert "h:files:www" in result

    def test_to_dict_stringifies_details(self):
        error = DirectoryUnavailableError("gone", details={"path": Path("/b/x"), "errno": 13})

        assert error.to_dict() == {
            "code": "DIRECTORY_UNAVAILABLE",
            "message": "gone",
            "details": {"path": "/b/x", "errno": "13"},
        }

    def test_can_be_raised_and_caught(self):
        with pytest.raises(BackupRotateError) as exc_info:
            raise ConfigurationError("no config")
        assert exc_info.value.code == "CONFIGURATION_MISSING"


class TestErrorCodes:
    """Each error class carries its own machine-readable code."""

    @pytest.mark.parametrize(
        "error_class,code",
        [
            (ConfigurationError, "CONFIGURATION_MISSING"),
            (DirectoryUnavailableError, "DIRECTORY_UNAVAILABLE"),
            (ArtifactMoveFailedError, "ARTIFACT_MOVE_FAILED"),
            (ArtifactDeleteFailedError, "ARTIFACT_DELETE_FAILED"),
            (AlreadyRunningError, "ALREADY_RUNNING"),
        ],
    )
    def test_default_code(self, error_class, code):
        assert error_class("x").code == code
        assert issubclass(error_class, BackupRotateError)

    def test_artifact_errors_share_a_base(self):
        assert issubclass(ArtifactMoveFailedError, ArtifactError)
        assert issubclass(ArtifactDeleteFailedError, ArtifactError)
        assert not issubclass(DirectoryUnavailableError, ArtifactError)
