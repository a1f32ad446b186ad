"""Project planner core: entity store, dependency progress and Gantt layout."""
from .models import Project, Task
from .progress import DependencyCycleError, compute_progress, resolve_progress
from .storage import InvalidPayloadError, ProjectStorage, StorageError
from .store import ProjectStore
from .timeline import dates_in_window, dependency_line, layout_timeline, task_position

__version__ = "0.1.0"

__all__ = [
    "Project",
    "Task",
    "ProjectStore",
    "ProjectStorage",
    "StorageError",
    "InvalidPayloadError",
    "DependencyCycleError",
    "compute_progress",
    "resolve_progress",
    "dates_in_window",
    "task_position",
    "dependency_line",
    "layout_timeline",
]
