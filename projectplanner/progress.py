"""Dependency-driven progress for tasks.

A task that is in progress and lists dependencies gets its progress from
the share of those dependencies that are completed. Everything else keeps
a value fixed by its status or set by hand.
"""
from typing import Dict, Iterable, List, Optional, Set

from .models import Task, clamp_progress


class DependencyCycleError(ValueError):
    pass


def _ratio_percent(done: int, total: int) -> int:
    # round-half-up in integers: floor(100*done/total + 0.5)
    return (200 * done + total) // (2 * total)


def _index(all_tasks: Iterable[Task]) -> Dict[str, Task]:
    out: Dict[str, Task] = {}
    for t in all_tasks:
        # first occurrence wins, same as a linear lookup
        out.setdefault(t.id, t)
    return out


def resolved_dependencies(task: Task, all_tasks: Iterable[Task]) -> List[Task]:
    """Dependency tasks that exist; dangling ids are dropped."""
    if not task.dependencies:
        return []
    by_id = _index(all_tasks)
    return [by_id[d] for d in dict.fromkeys(task.dependencies) if d in by_id]


def compute_progress(task: Task, all_tasks: Iterable[Task]) -> int:
    if task.status != "in-progress" or not task.dependencies:
        return task.progress
    deps = resolved_dependencies(task, all_tasks)
    if not deps:
        return task.progress
    done = sum(1 for d in deps if d.status == "completed")
    return _ratio_percent(done, len(deps))


def resolve_progress(task: Task, all_tasks: Iterable[Task], manual: Optional[int] = None) -> int:
    """Progress a task should carry after a status change or edit.

    completed -> 100, todo -> 0, in-progress with dependencies -> derived,
    in-progress without -> ``manual`` (or the stored value) clamped to 0..100.
    """
    if task.status == "completed":
        return 100
    if task.status == "todo":
        return 0
    if task.dependencies and resolved_dependencies(task, all_tasks):
        return compute_progress(task, all_tasks)
    return clamp_progress(task.progress if manual is None else manual)


def direct_dependents(task_id: str, all_tasks: Iterable[Task]) -> List[Task]:
    """In-progress tasks that list task_id as a dependency (one hop)."""
    return [
        t for t in all_tasks
        if t.status == "in-progress" and t.dependencies and task_id in t.dependencies
    ]


def would_create_cycle(task_id: str, dependencies: Optional[Iterable[str]], all_tasks: Iterable[Task]) -> bool:
    """True if giving task_id these dependencies closes a loop.

    Walks the dependency graph from each proposed dependency; reaching
    task_id again means a cycle. Dangling ids are dead ends.
    """
    if not dependencies:
        return False
    graph: Dict[str, List[str]] = {t.id: list(t.dependencies or []) for t in all_tasks}
    graph[task_id] = list(dependencies)
    visited: Set[str] = set()
    stack = list(dependencies)
    while stack:
        node = stack.pop()
        if node == task_id:
            return True
        if node in visited:
            continue
        visited.add(node)
        stack.extend(graph.get(node, []))
    return False
