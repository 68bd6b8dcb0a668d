"""Tests for the LogViewer facade."""

import json

import pytest

from log_viewer.config import Config
from log_viewer.connection import STATUS_CONNECTED, STATUS_DISCONNECTED
from log_viewer.models import ConnectionState
from log_viewer.viewer import LogViewer


@pytest.fixture
def viewer(config, transports, clock):
    return LogViewer(config, transport_factory=transports, clock=clock)


def _send(transports, **payload):
    transports.latest.fire("message", json.dumps(payload))


class TestSnapshot:
    def test_initial_snapshot(self, viewer):
        snap = viewer.snapshot()
        assert snap.status == STATUS_DISCONNECTED
        assert snap.state == ConnectionState.DISCONNECTED
        assert snap.is_connected is False
        assert snap.records == ()
        assert snap.levels == ("ALL",)
        assert snap.total_count == 0
        assert snap.displayed_count == 0
        assert snap.selected_level == "ALL"

    def test_initial_filter_from_config(self, transports):
        viewer = LogViewer(Config(level_filter="error"), transport_factory=transports)
        assert viewer.selected_level == "ERROR"
        assert viewer.snapshot().selected_level == "ERROR"


@pytest.mark.asyncio
class TestLiveStream:
    async def test_frames_flow_into_store(self, viewer, transports):
        viewer.start()
        transports.latest.fire("open")
        _send(transports, timestamp="10:00:00", level="INFO", message="up")
        _send(transports, timestamp="10:00:01", level="ERROR", message="boom")
        transports.latest.fire("message", "raw text")

        snap = viewer.snapshot()
        assert snap.status == STATUS_CONNECTED
        assert snap.is_connected is True
        assert [r.message for r in snap.records] == ["up", "boom", "raw text"]
        assert snap.levels == ("ALL", "INFO", "ERROR")
        assert snap.total_count == 3
        viewer.teardown()

    async def test_filter_narrows_display_not_store(self, viewer, transports):
        viewer.start()
        _send(transports, timestamp="t", level="INFO", message="a")
        _send(transports, timestamp="t", level="ERROR", message="b")
        _send(transports, timestamp="t", level="info", message="c")

        viewer.set_filter("info")

        snap = viewer.snapshot()
        assert snap.selected_level == "INFO"
        assert [r.message for r in snap.records] == ["a", "c"]
        assert snap.displayed_count == 2
        assert snap.total_count == 3
        assert snap.levels[0] == "ALL"
        viewer.teardown()

    async def test_blank_filter_means_all(self, viewer):
        viewer.set_filter("  ")
        assert viewer.selected_level == "ALL"

    async def test_history_resync_on_reconnect(self, viewer, transports):
        viewer.start()
        _send(transports, type="HISTORY", data="one\ntwo")
        _send(transports, type="log", message="three")
        transports.latest.fire("close")
        viewer.connection.connect()
        _send(transports, type="HISTORY", data="two\nthree")

        records = viewer.snapshot().records
        assert [r.message for r in records] == ["two", "three"]
        assert [r.line_number for r in records] == [4, 5]
        assert all(r.is_history for r in records)
        viewer.teardown()

    async def test_clear_restarts_numbering(self, viewer, transports):
        viewer.start()
        _send(transports, type="HISTORY", data="a\nb\n\nc")
        _send(transports, timestamp="12:00:00", level="ERROR", message="boom")

        viewer.clear()
        assert viewer.snapshot().records == ()

        _send(transports, type="log", message="hi")

        records = viewer.snapshot().records
        assert len(records) == 1
        assert records[0].line_number == 1
        assert records[0].level == "INFO"
        assert records[0].message == "hi"
        assert records[0].is_history is False
        viewer.teardown()

    async def test_frames_after_teardown_dropped(self, viewer, transports):
        viewer.start()
        transport = transports.latest
        viewer.teardown()
        transport.fire("message", "late")
        assert viewer.snapshot().total_count == 0


@pytest.mark.asyncio
class TestNotifications:
    async def test_listeners_see_each_change(self, viewer, transports):
        seen = []
        viewer.subscribe("append", lambda records: seen.append(("append", len(records))))
        viewer.subscribe("replace", lambda records: seen.append(("replace", len(records))))
        viewer.subscribe("clear", lambda: seen.append(("clear",)))
        viewer.subscribe("filter", lambda level: seen.append(("filter", level)))

        viewer.start()
        _send(transports, type="HISTORY", data="a\nb")
        _send(transports, type="log", message="c")
        _send(transports, type="ping")
        viewer.set_filter("error")
        viewer.clear()
        viewer.teardown()

        assert seen == [
            ("replace", 2),
            ("append", 1),
            ("filter", "ERROR"),
            ("clear",),
        ]

    async def test_status_listener(self, viewer, transports):
        statuses = []
        viewer.subscribe("status", lambda status, state: statuses.append(status))
        viewer.start()
        transports.latest.fire("open")
        viewer.teardown()
        assert statuses == ["Connecting...", "Connected", "Closed"]

    async def test_unsubscribe(self, viewer, transports):
        seen = []
        subscription = viewer.subscribe("append", seen.append)
        viewer.start()
        _send(transports, type="log", message="one")
        subscription.cancel()
        _send(transports, type="log", message="two")
        viewer.teardown()
        assert len(seen) == 1


def test_max_records_from_config(transports):
    viewer = LogViewer(Config(max_records=2), transport_factory=transports)
    for i in range(5):
        viewer.handle_frame(json.dumps({"type": "log", "message": f"m{i}"}))
    snap = viewer.snapshot()
    assert [r.message for r in snap.records] == ["m3", "m4"]
    assert [r.line_number for r in snap.records] == [4, 5]
