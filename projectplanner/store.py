"""In-memory project collection with sqlite persistence and change signal.

Every mutation runs the same pipeline: apply the change, recompute
dependency-driven progress, persist the whole collection, emit
``changed``. Views connect to ``changed`` and re-read what they show.
"""
import logging
import time
from typing import List, Optional

from PyQt5.QtCore import QObject, pyqtSignal

from .models import (
    Project,
    Task,
    normalize_fields,
    projects_from_data,
    projects_to_data,
)
from .progress import (
    DependencyCycleError,
    compute_progress,
    direct_dependents,
    resolve_progress,
    would_create_cycle,
)
from .seed import sample_projects
from .storage import InvalidPayloadError, ProjectStorage, StorageError

logger = logging.getLogger(__name__)

# Never merged from a partial update
_PROJECT_FIXED = ("id", "tasks")
_TASK_FIXED = ("id", "project_id")


class ProjectStore(QObject):
    changed = pyqtSignal()

    def __init__(self, storage: Optional[ProjectStorage] = None, clock=None, parent=None):
        super().__init__(parent)
        self.storage = storage or ProjectStorage()
        # seconds since epoch; ids are derived from it in milliseconds
        self._clock = clock or time.time
        self.projects: List[Project] = []
        self.load()

    # --- loading / saving ---
    def load(self) -> List[Project]:
        """Read the stored collection, seeding sample data on first run.

        A stored value that cannot be read is logged and replaced in memory
        by the sample data; it is only overwritten by the next mutation.
        """
        try:
            data = self.storage.load()
        except StorageError as e:
            logger.error("Error loading projects from %s: %s", self.storage.db_path, e)
            self.projects = projects_from_data(sample_projects())
            self.changed.emit()
            return self.projects
        if data is None:
            logger.info("No stored projects in %s; writing sample data", self.storage.db_path)
            self.projects = projects_from_data(sample_projects())
            self.persist()
        else:
            try:
                self.projects = projects_from_data(data)
            except (TypeError, ValueError, AttributeError, OverflowError) as e:
                logger.error("Stored projects in %s could not be read: %s", self.storage.db_path, e)
                self.projects = projects_from_data(sample_projects())
            else:
                logger.debug("Loaded %d projects from %s", len(self.projects), self.storage.db_path)
        self.changed.emit()
        return self.projects

    def persist(self) -> bool:
        try:
            self.storage.save(projects_to_data(self.projects))
        except StorageError as e:
            logger.error("Error saving projects: %s", e)
            return False
        return True

    def _commit(self) -> bool:
        ok = self.persist()
        self.changed.emit()
        return ok

    def save_projects(self, projects) -> bool:
        """Replace the whole collection (Project objects or stored dicts).

        Raises InvalidPayloadError for anything but a list of projects;
        nothing is written or changed in that case.
        """
        if not isinstance(projects, list):
            raise InvalidPayloadError("Invalid projects data")
        converted = []
        for i, p in enumerate(projects):
            if isinstance(p, Project):
                converted.append(p)
                continue
            if not isinstance(p, dict):
                raise InvalidPayloadError(f"Invalid project at index {i}: {type(p).__name__}")
            try:
                converted.append(Project.from_dict(p))
            except (TypeError, ValueError, AttributeError) as e:
                raise InvalidPayloadError(f"Invalid project at index {i}: {e}")
        self.projects = converted
        return self._commit()

    # --- id management ---
    def _stamp(self) -> int:
        return int(self._clock() * 1000)

    def _new_project_id(self) -> str:
        stamp = self._stamp()
        existing = {p.id for p in self.projects}
        while str(stamp) in existing:
            stamp += 1
        return str(stamp)

    def _new_task_id(self, project: Project) -> str:
        stamp = self._stamp()
        existing = {t.id for t in project.tasks}
        while f"{project.id}-{stamp}" in existing:
            stamp += 1
        return f"{project.id}-{stamp}"

    # --- queries ---
    def get_project(self, project_id) -> Optional[Project]:
        for p in self.projects:
            if p.id == project_id:
                return p
        return None

    def get_all_tasks(self) -> List[Task]:
        return [t for p in self.projects for t in p.tasks]

    def _locate_task(self, task_id):
        for p in self.projects:
            t = p.find_task(task_id)
            if t is not None:
                return p, t
        return None, None

    def get_task(self, task_id) -> Optional[Task]:
        return self._locate_task(task_id)[1]

    # --- project operations ---
    def create_project(self, data) -> Project:
        fields = normalize_fields(data, Project.FIELD_KEYS)
        for k in _PROJECT_FIXED:
            fields.pop(k, None)
        project = Project(id=self._new_project_id(), title=str(fields.pop("title", "") or ""))
        for k, v in fields.items():
            setattr(project, k, v)
        self.projects.append(project)
        logger.debug("Created project %s", project.id)
        self._commit()
        return project

    def update_project(self, project_id, fields) -> Optional[Project]:
        project = self.get_project(project_id)
        if project is None:
            logger.debug("update_project: %s not found", project_id)
            return None
        changes = normalize_fields(fields, Project.FIELD_KEYS)
        for k in _PROJECT_FIXED:
            changes.pop(k, None)
        for k, v in changes.items():
            setattr(project, k, v)
        self._commit()
        return project

    def delete_project(self, project_id) -> bool:
        before = len(self.projects)
        self.projects = [p for p in self.projects if p.id != project_id]
        if len(self.projects) == before:
            logger.debug("delete_project: %s not found", project_id)
            return False
        self._commit()
        return True

    # --- task operations ---
    def create_task(self, project_id, data) -> Optional[Task]:
        project = self.get_project(project_id)
        if project is None:
            logger.debug("create_task: project %s not found", project_id)
            return None
        fields = normalize_fields(data, Task.FIELD_KEYS)
        for k in _TASK_FIXED:
            fields.pop(k, None)
        task = Task(
            id=self._new_task_id(project),
            title=str(fields.pop("title", "") or ""),
            project_id=project.id,
        )
        for k, v in fields.items():
            setattr(task, k, v)
        task.progress = resolve_progress(task, self.get_all_tasks())
        project.tasks.append(task)
        logger.debug("Created task %s in project %s", task.id, project.id)
        self._commit()
        return task

    def update_task(self, task_id, fields) -> Optional[Task]:
        """Merge ``fields`` into the task and recompute progress.

        When the update marks the task completed, every in-progress task
        (in any project) that lists it as a dependency is recomputed too.
        This is a single hop; dependents of those dependents are untouched.

        Raises DependencyCycleError if new dependencies would close a loop.
        """
        _, task = self._locate_task(task_id)
        if task is None:
            logger.debug("update_task: %s not found", task_id)
            return None
        changes = normalize_fields(fields, Task.FIELD_KEYS)
        for k in _TASK_FIXED:
            changes.pop(k, None)
        if changes.get("dependencies") and would_create_cycle(task_id, changes["dependencies"], self.get_all_tasks()):
            raise DependencyCycleError(
                f"Dependencies {changes['dependencies']} for task {task_id} would create a cycle"
            )
        for k, v in changes.items():
            setattr(task, k, v)

        all_tasks = self.get_all_tasks()
        task.progress = resolve_progress(task, all_tasks)
        if changes.get("status") == "completed":
            for dependent in direct_dependents(task_id, all_tasks):
                dependent.progress = compute_progress(dependent, all_tasks)
        self._commit()
        return task

    def delete_task(self, task_id, prune_dependencies: bool = False) -> bool:
        """Remove a task from its project.

        Other tasks keep the deleted id in their dependency lists unless
        ``prune_dependencies`` is set; a dangling id no longer counts
        towards derived progress either way.
        """
        project, task = self._locate_task(task_id)
        if task is None:
            logger.debug("delete_task: %s not found", task_id)
            return False
        project.tasks = [t for t in project.tasks if t.id != task_id]
        if prune_dependencies:
            for t in self.get_all_tasks():
                if t.dependencies and task_id in t.dependencies:
                    t.dependencies = [d for d in t.dependencies if d != task_id] or None
        self._commit()
        return True
