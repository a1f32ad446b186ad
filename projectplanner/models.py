"""Project and Task records plus their JSON form.

Stored JSON keeps the camelCase keys the mobile app wrote
(startDate, projectId, ...); Python attributes are snake_case.
"""
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

PROJECT_STATUSES = ("planning", "active", "completed", "on-hold")
TASK_STATUSES = ("todo", "in-progress", "completed")
PRIORITIES = ("low", "medium", "high")

# Accepted on load; always written back as ISO
DATE_FORMATS = [
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%Y/%m/%d",
]


def parse_date(value):
    """Return a date for a date/datetime/string value, None if unparseable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    s = value.strip()
    if not s:
        return None
    # Tolerate full ISO timestamps ("2024-01-15T00:00:00.000Z")
    if "T" in s:
        s = s.split("T", 1)[0]
    for f in DATE_FORMATS:
        try:
            return datetime.strptime(s, f).date()
        except ValueError:
            continue
    return None


def _to_iso(d):
    return d.strftime("%Y-%m-%d") if d else ""


def clamp_progress(value) -> int:
    try:
        pc = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(pc):
        return 0
    # Clamp before rounding so +/-inf land on 100/0
    return int(round(max(0.0, min(100.0, pc))))


def dependency_ids(value) -> Optional[List[str]]:
    """Normalise a dependencies value to a list of id strings, None if empty."""
    if value is None:
        return None
    if isinstance(value, str):
        # Older rows kept dependencies as a comma separated string
        deps = [d.strip() for d in value.split(",") if d.strip()]
    elif isinstance(value, (list, tuple, set)):
        deps = [str(d) for d in value]
    else:
        deps = [str(value)]
    return deps or None


@dataclass
class Task:
    id: str
    title: str
    project_id: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: str = "todo"
    priority: str = "medium"
    description: Optional[str] = None
    assignee: Optional[str] = None
    dependencies: Optional[List[str]] = None
    progress: int = 0

    # snake_case attribute -> stored key
    FIELD_KEYS = {
        "id": "id",
        "title": "title",
        "description": "description",
        "status": "status",
        "priority": "priority",
        "start_date": "startDate",
        "end_date": "endDate",
        "assignee": "assignee",
        "project_id": "projectId",
        "dependencies": "dependencies",
        "progress": "progress",
    }

    @property
    def has_dependencies(self) -> bool:
        return bool(self.dependencies)

    def to_dict(self):
        out = {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "priority": self.priority,
            "startDate": _to_iso(self.start_date),
            "endDate": _to_iso(self.end_date),
            "projectId": self.project_id,
            "progress": self.progress,
        }
        if self.description:
            out["description"] = self.description
        if self.assignee:
            out["assignee"] = self.assignee
        if self.dependencies:
            out["dependencies"] = list(self.dependencies)
        return out

    @classmethod
    def from_dict(cls, raw, project_id=None):
        return cls(
            id=str(raw.get("id", "")),
            title=str(raw.get("title") or ""),
            project_id=str(raw.get("projectId") or project_id or ""),
            start_date=parse_date(raw.get("startDate")),
            end_date=parse_date(raw.get("endDate")),
            status=raw.get("status") if raw.get("status") in TASK_STATUSES else "todo",
            priority=raw.get("priority") if raw.get("priority") in PRIORITIES else "medium",
            description=raw.get("description") or None,
            assignee=raw.get("assignee") or None,
            dependencies=dependency_ids(raw.get("dependencies")),
            progress=clamp_progress(raw.get("progress", 0)),
        )


@dataclass
class Project:
    id: str
    title: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: str = "planning"
    description: Optional[str] = None
    color: str = "#6366f1"
    progress: int = 0
    tasks: List[Task] = field(default_factory=list)
    team_members: Optional[List[str]] = None

    FIELD_KEYS = {
        "id": "id",
        "title": "title",
        "description": "description",
        "status": "status",
        "start_date": "startDate",
        "end_date": "endDate",
        "color": "color",
        "progress": "progress",
        "tasks": "tasks",
        "team_members": "teamMembers",
    }

    def find_task(self, task_id) -> Optional[Task]:
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None

    def to_dict(self):
        out = {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "startDate": _to_iso(self.start_date),
            "endDate": _to_iso(self.end_date),
            "color": self.color,
            "progress": self.progress,
            "tasks": [t.to_dict() for t in self.tasks],
        }
        if self.description:
            out["description"] = self.description
        if self.team_members:
            out["teamMembers"] = list(self.team_members)
        return out

    @classmethod
    def from_dict(cls, raw):
        pid = str(raw.get("id", ""))
        tasks = [Task.from_dict(t, project_id=pid) for t in (raw.get("tasks") or []) if isinstance(t, dict)]
        return cls(
            id=pid,
            title=str(raw.get("title") or ""),
            start_date=parse_date(raw.get("startDate")),
            end_date=parse_date(raw.get("endDate")),
            status=raw.get("status") if raw.get("status") in PROJECT_STATUSES else "planning",
            description=raw.get("description") or None,
            color=raw.get("color") or "#6366f1",
            progress=clamp_progress(raw.get("progress", 0)),
            tasks=tasks,
            team_members=list(raw.get("teamMembers") or []) or None,
        )


def normalize_fields(fields, keys):
    """Map a partial update to attribute names.

    Accepts either the snake_case attribute names or the stored camelCase
    keys; unknown keys are dropped. Date values are parsed.
    """
    by_stored = {v: k for k, v in keys.items()}
    out = {}
    for k, v in fields.items():
        attr = k if k in keys else by_stored.get(k)
        if attr is None:
            continue
        if attr in ("start_date", "end_date"):
            v = parse_date(v)
        elif attr == "progress":
            v = clamp_progress(v)
        elif attr == "dependencies":
            v = dependency_ids(v)
        out[attr] = v
    return out


def projects_from_data(data) -> List[Project]:
    return [Project.from_dict(p) for p in data if isinstance(p, dict)]


def projects_to_data(projects) -> list:
    return [p.to_dict() for p in projects]
