"""Flask HTTP surface over the log viewer."""

from typing import Callable

from flask import Flask, jsonify, request

from log_viewer.filters import filter_records
from log_viewer.viewer import LogViewer


def _direct(fn, *args):
    fn(*args)


def create_dashboard_app(viewer: LogViewer, dispatch: Callable | None = None) -> Flask:
    """Build the app. Actions go through *dispatch* (e.g. ``loop.call_soon_threadsafe``)."""
    if dispatch is None:
        dispatch = _direct
    app = Flask(__name__)

    @app.route("/health")
    def health():
        return jsonify(status="ok")

    @app.route("/status")
    def status():
        snap = viewer.snapshot()
        return jsonify(
            status=snap.status,
            state=snap.state.value,
            is_connected=snap.is_connected,
            total_count=snap.total_count,
            displayed_count=snap.displayed_count,
            levels=list(snap.levels),
            selected_level=snap.selected_level,
        )

    @app.route("/logs")
    def logs():
        level = request.args.get("level") or viewer.selected_level
        records = filter_records(viewer.store.records, level)
        return jsonify(level=level.upper(), records=[r.to_dict() for r in records])

    @app.route("/clear", methods=["POST"])
    def clear():
        dispatch(viewer.clear)
        return jsonify(status="ok")

    @app.route("/filter", methods=["POST"])
    def set_filter():
        body = request.get_json(silent=True) or {}
        level = body.get("level")
        if not isinstance(level, str) or not level.strip():
            return jsonify(status="error", message="missing 'level'"), 400
        dispatch(viewer.set_filter, level)
        return jsonify(status="ok", level=level.strip().upper())

    return app


def run_dashboard(app: Flask, port: int):
    """Run the Flask app (intended for use in a daemon thread)."""
    app.run(host="0.0.0.0", port=port, use_reloader=False)
