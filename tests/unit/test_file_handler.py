"""Unit tests for FileHandler with log rotation."""

from datetime import datetime
from pathlib import Path

import pytest

from sms_sender.logging.file_handler import FileHandler
from sms_sender.logging.log_models import LogEntry


@pytest.fixture
def log_entry():
    return LogEntry(
        timestamp=datetime.now(),
        level="INFO",
        source="SmsTransport",
        message="Sending command",
        command="AT+CMGF=0"
    )


class TestFileHandler:
    """Test suite for FileHandler class."""

    def test_creates_missing_directory(self, tmp_path):
        log_file = tmp_path / "nested" / "logs" / "comm.log"
        handler = FileHandler(str(log_file))

        assert log_file.parent.is_dir()
        assert handler.log_file_path == log_file.resolve()
        assert handler.max_size_bytes == 10 * 1024 * 1024
        handler.close()

    def test_write_appends_lines(self, tmp_path, log_entry):
        log_file = tmp_path / "comm.log"

        with FileHandler(str(log_file)) as handler:
            assert handler.write(log_entry)
            assert handler.write(log_entry)

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert lines[0] == log_entry.to_string()

    def test_write_after_close_fails(self, tmp_path, log_entry):
        handler = FileHandler(str(tmp_path / "comm.log"))
        handler.close()

        assert handler.write(log_entry) is False

    def test_close_is_idempotent(self, tmp_path):
        handler = FileHandler(str(tmp_path / "comm.log"))
        handler.close()
        handler.close()

    def test_rotation(self, tmp_path, log_entry):
        log_file = tmp_path / "comm.log"
        handler = FileHandler(str(log_file), backup_count=2)
        handler.max_size_bytes = 1

        for _ in range(4):
            handler.write(log_entry)
        handler.close()

        assert log_file.exists()
        assert Path(f"{log_file}.1").exists()
        assert Path(f"{log_file}.2").exists()
        assert not Path(f"{log_file}.3").exists()
        assert len(log_file.read_text(encoding="utf-8").splitlines()) == 1

    def test_rotation_without_backups_truncates(self, tmp_path, log_entry):
        log_file = tmp_path / "comm.log"
        handler = FileHandler(str(log_file), backup_count=0)
        handler.max_size_bytes = 1

        handler.write(log_entry)
        handler.write(log_entry)
        handler.close()

        assert not Path(f"{log_file}.1").exists()
        assert len(log_file.read_text(encoding="utf-8").splitlines()) == 1

    def test_flush(self, tmp_path, log_entry):
        log_file = tmp_path / "comm.log"
        handler = FileHandler(str(log_file))
        handler.write(log_entry)
        handler.flush()

        assert log_file.read_text(encoding="utf-8").strip() == log_entry.to_string()
        handler.close()
