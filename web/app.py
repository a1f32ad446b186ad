import os
from datetime import date

from flask import Flask, Response, abort, current_app, jsonify, request

from projectplanner import config
from projectplanner.models import parse_date
from projectplanner.queries import filter_projects, filter_tasks, is_overdue, status_counts
from projectplanner.storage import ProjectStorage
from projectplanner.store import ProjectStore
from projectplanner.timeline import PERIODS, layout_timeline

app = Flask(__name__)


def get_store() -> ProjectStore:
    """Store shared by the viewer's requests, built on first use.

    Tests (or a WSGI wrapper) can inject one via app.config["PLANNER_STORE"].
    """
    store = current_app.config.get("PLANNER_STORE")
    if store is None:
        storage = ProjectStorage(config.get_db_path(), read_only=config.read_only_requested())
        store = ProjectStore(storage)
        current_app.config["PLANNER_STORE"] = store
        current_app.logger.info("Loaded planner data from %s (read-only=%s)", storage.db_path, storage.read_only)
    return store


def _today():
    raw = request.args.get("date")
    if not raw:
        return date.today()
    d = parse_date(raw)
    if d is None:
        abort(400, description=f"Invalid date: {raw}")
    return d


@app.errorhandler(400)
def bad_request(e):
    return jsonify({"error": e.description}), 400


@app.route("/")
def index():
    return jsonify({
        "endpoints": ["/api/projects", "/api/tasks", "/api/timeline", "/api/debug", "/health"],
        "periods": list(PERIODS),
    })


@app.route("/api/projects")
def api_projects():
    store = get_store()
    out = []
    for p in filter_projects(store.projects, request.args.get("status")):
        rec = p.to_dict()
        rec["taskCounts"] = status_counts(p.tasks)
        out.append(rec)
    return jsonify(out)


@app.route("/api/tasks")
def api_tasks():
    store = get_store()
    today = _today()
    tasks = filter_tasks(
        store.get_all_tasks(),
        project_id=request.args.get("project"),
        status=request.args.get("status"),
    )
    out = []
    for t in tasks:
        rec = t.to_dict()
        rec["overdue"] = is_overdue(t, today)
        out.append(rec)
    return jsonify(out)


@app.route("/api/timeline")
def api_timeline():
    store = get_store()
    period = request.args.get("period") or os.environ.get("TIMELINE_PERIOD", config.DEFAULT_PERIOD)
    if period not in PERIODS:
        abort(400, description=f"Unknown period: {period}")
    tasks = filter_tasks(store.get_all_tasks(), project_id=request.args.get("project"))
    layout = layout_timeline(tasks, period, _today(), config.TimelineConfig.from_env())
    return jsonify(layout.to_dict())


@app.route("/api/debug")
def api_debug():
    store = get_store()
    db = store.storage.db_path
    info = {
        "db_path": db,
        "db_exists": os.path.exists(db),
        "read_only": store.storage.read_only,
        "project_count": len(store.projects),
        "task_count": len(store.get_all_tasks()),
    }
    return jsonify(info)


@app.route("/health")
def health():
    # Lightweight health check endpoint for load balancers/monitors
    return Response("ok", mimetype="text/plain")


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    debug = os.environ.get("WEB_DEBUG", "1").lower() not in ("0", "false", "no")
    app.run(host="127.0.0.1", port=port, debug=debug)
