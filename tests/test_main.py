"""Tests for the command-line entry point."""

import io
import json

import pytest

from log_viewer.config import Config
from log_viewer.formatter import format_text
from log_viewer.viewer import LogViewer
from main import attach_console, build_config, parse_args


class TestArgs:
    def test_defaults(self, monkeypatch):
        for var in ("LOG_SOURCE_URL", "CONFIG_PATH", "COLOR", "LEVEL_FILTER"):
            monkeypatch.delenv(var, raising=False)
        config = build_config(parse_args([]))
        assert config.url == "ws://localhost:3000"
        assert config.color is False

    def test_cli_overrides(self, monkeypatch):
        monkeypatch.setenv("LOG_SOURCE_URL", "ws://env:1")
        args = parse_args([
            "ws://cli:9",
            "--level", "warn",
            "--reconnect-delay", "0.5",
            "--max-records", "100",
            "--color",
        ])
        config = build_config(args)
        assert config.url == "ws://cli:9"
        assert config.level_filter == "warn"
        assert config.reconnect_delay == 0.5
        assert config.max_records == 100
        assert config.color is True

    def test_env_kept_when_flag_absent(self, monkeypatch):
        monkeypatch.setenv("LOG_SOURCE_URL", "ws://env:1")
        config = build_config(parse_args([]))
        assert config.url == "ws://env:1"


class TestConsole:
    @pytest.fixture
    def viewer(self, transports, clock):
        return LogViewer(Config(), transport_factory=transports, clock=clock)

    def test_prints_appended_records(self, viewer):
        out = io.StringIO()
        attach_console(viewer, format_text, out=out)

        viewer.handle_frame(json.dumps({"type": "log", "message": "hi"}))

        assert out.getvalue() == "#1 [12:34:56] [INFO] hi\n"

    def test_filtered_records_not_printed(self, viewer):
        out = io.StringIO()
        attach_console(viewer, format_text, out=out)
        viewer.set_filter("ERROR")
        out.truncate(0)
        out.seek(0)

        viewer.handle_frame(json.dumps({"type": "log", "message": "quiet"}))

        assert out.getvalue() == ""

    def test_history_reprints_view(self, viewer):
        out = io.StringIO()
        attach_console(viewer, format_text, out=out)

        viewer.handle_frame(json.dumps({"type": "HISTORY", "data": "a\nb"}))

        lines = out.getvalue().splitlines()
        assert lines[0] == "--- showing ALL ---"
        assert lines[1:] == [
            "#1 [12:34:56] [INFO] a (history)",
            "#2 [12:34:56] [INFO] b (history)",
        ]

    def test_clear_banner(self, viewer):
        out = io.StringIO()
        attach_console(viewer, format_text, out=out)
        viewer.clear()
        assert out.getvalue() == "--- cleared ---\n"
