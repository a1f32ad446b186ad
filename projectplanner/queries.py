"""Read-only helpers used by list and detail screens.

All filters keep the input order, since the timeline derives row
positions from it.
"""
from datetime import date
from typing import Dict, Iterable, List, Optional

from .models import TASK_STATUSES, Project, Task


def filter_projects(projects: Iterable[Project], status: Optional[str] = None) -> List[Project]:
    if not status or status == "all":
        return list(projects)
    return [p for p in projects if p.status == status]


def filter_tasks(tasks: Iterable[Task], project_id: Optional[str] = None, status: Optional[str] = None) -> List[Task]:
    out = []
    for t in tasks:
        if project_id and t.project_id != project_id:
            continue
        if status and status != "all" and t.status != status:
            continue
        out.append(t)
    return out


def status_counts(tasks: Iterable[Task]) -> Dict[str, int]:
    counts = {s: 0 for s in TASK_STATUSES}
    for t in tasks:
        if t.status in counts:
            counts[t.status] += 1
    return counts


def is_overdue(task: Task, today: Optional[date] = None) -> bool:
    if task.status == "completed" or task.end_date is None:
        return False
    return task.end_date < (today or date.today())


def available_dependencies(project: Project, task: Optional[Task] = None) -> List[Task]:
    """Tasks of the same project a task may depend on (itself excluded)."""
    if task is None:
        return list(project.tasks)
    return [t for t in project.tasks if t.id != task.id]
