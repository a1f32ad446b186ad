"""Gantt layout: date window, bar geometry and dependency connectors.

Everything here is a pure function of its inputs. Row position is the
task's index in the sequence handed in, so callers must keep that
sequence in a stable order (filters preserve insertion order).
"""
import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

from dateutil.relativedelta import relativedelta

from .config import TimelineConfig
from .models import Task

# (offset before reference, offset after reference)
PERIODS = {
    "week": (relativedelta(days=-7), relativedelta(days=+21)),
    "month": (relativedelta(months=-1), relativedelta(months=+3)),
    "quarter": (relativedelta(months=-3), relativedelta(months=+9)),
}

STATUS_COLORS = {
    "completed": "#10b981",
    "in-progress": "#f59e0b",
}
DEFAULT_COLOR = "#6b7280"

# Shortest horizontal run drawn for a connector
MIN_CONNECTOR_RUN = 20
ARROW_SIZE = 6


def status_color(status: str) -> str:
    return STATUS_COLORS.get(status, DEFAULT_COLOR)


def window_bounds(period: str, reference: Optional[date] = None):
    if period not in PERIODS:
        raise ValueError(f"Unknown timeline period: {period!r} (expected one of {', '.join(PERIODS)})")
    ref = reference or date.today()
    before, after = PERIODS[period]
    return ref + before, ref + after


def dates_in_window(period: str, reference: Optional[date] = None) -> List[date]:
    """Every calendar day of the window, inclusive, ascending."""
    start, end = window_bounds(period, reference)
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def days_between(a: date, b: date) -> int:
    return (b - a).days


@dataclass
class BarPosition:
    offset: int
    width: int


def task_position(task: Task, window_start: date, day_width: int) -> BarPosition:
    # Tasks starting before the window sit flush with its left edge
    offset = max(0, days_between(window_start, task.start_date) * day_width)
    duration = math.ceil(days_between(task.start_date, task.end_date))
    # At least one day wide, even for zero or negative durations
    width = max(day_width, duration * day_width)
    return BarPosition(offset=offset, width=width)


def row_top(index: int, row_height: int) -> int:
    return index * row_height


@dataclass
class Connector:
    task_id: str
    dependency_id: str
    from_x: int
    from_y: int
    to_x: int
    to_y: int
    task_index: int
    dependency_index: int
    # dependency ends after the dependent starts
    conflict: bool = False

    @property
    def horizontal_run(self) -> int:
        return max(MIN_CONNECTOR_RUN, self.to_x - self.from_x)

    @property
    def vertical_run(self) -> int:
        return abs(self.to_y - self.from_y)

    def path(self):
        """Polyline along the dependency row, then down to the dependent row.

        The horizontal segment is ``horizontal_run`` long. When the dependent
        starts left of that, the line turns back along the row to ``to_x``
        before dropping.
        """
        run_end = self.from_x + self.horizontal_run
        points = [(self.from_x, self.from_y), (run_end, self.from_y)]
        if run_end != self.to_x:
            points.append((self.to_x, self.from_y))
        points.append((self.to_x, self.to_y))
        return points

    @property
    def arrow(self):
        # top-left corner of the arrowhead box at the dependent bar's left edge
        return (self.to_x - ARROW_SIZE, self.to_y - ARROW_SIZE)

    def to_dict(self):
        return {
            "taskId": self.task_id,
            "dependencyId": self.dependency_id,
            "fromX": self.from_x,
            "fromY": self.from_y,
            "toX": self.to_x,
            "toY": self.to_y,
            "taskIndex": self.task_index,
            "dependencyIndex": self.dependency_index,
            "horizontalRun": self.horizontal_run,
            "verticalRun": self.vertical_run,
            "path": [list(p) for p in self.path()],
            "arrow": list(self.arrow),
            "conflict": self.conflict,
        }


def _row_index(tasks: Sequence[Task]) -> Dict[str, int]:
    idx: Dict[str, int] = {}
    for i, t in enumerate(tasks):
        idx.setdefault(t.id, i)
    return idx


def _placeable(task: Task) -> bool:
    return task.start_date is not None and task.end_date is not None


def dependency_line(
    task: Task,
    dependency_id: str,
    tasks: Sequence[Task],
    window_start: date,
    config: Optional[TimelineConfig] = None,
    row_index: Optional[Dict[str, int]] = None,
) -> Optional[Connector]:
    """Connector from dependency_id's bar to task's bar, or None.

    Only drawn when the dependency's row is above the dependent's row in
    ``tasks``. With another ordering or a filter that hides either task
    the arrow is simply not drawn.
    """
    cfg = config or TimelineConfig()
    rows = row_index if row_index is not None else _row_index(tasks)
    task_idx = rows.get(task.id)
    dep_idx = rows.get(dependency_id)
    if task_idx is None or dep_idx is None or task_idx <= dep_idx:
        return None
    dep = tasks[dep_idx]
    if not _placeable(task) or not _placeable(dep):
        return None
    task_pos = task_position(task, window_start, cfg.day_width)
    dep_pos = task_position(dep, window_start, cfg.day_width)
    return Connector(
        task_id=task.id,
        dependency_id=dependency_id,
        from_x=dep_pos.offset + dep_pos.width,
        from_y=row_top(dep_idx, cfg.row_height) + cfg.row_center,
        to_x=task_pos.offset,
        to_y=row_top(task_idx, cfg.row_height) + cfg.row_center,
        task_index=task_idx,
        dependency_index=dep_idx,
        conflict=dep.end_date > task.start_date,
    )


@dataclass
class Bar:
    task_id: str
    project_id: str
    title: str
    status: str
    progress: int
    row: int
    top: int
    offset: int
    width: int
    color: str

    def to_dict(self):
        return {
            "taskId": self.task_id,
            "projectId": self.project_id,
            "title": self.title,
            "status": self.status,
            "progress": self.progress,
            "row": self.row,
            "top": self.top,
            "left": self.offset,
            "width": self.width,
            "color": self.color,
        }


@dataclass
class TimelineLayout:
    period: str
    dates: List[date]
    day_width: int
    row_height: int
    bars: List[Bar] = field(default_factory=list)
    connectors: List[Connector] = field(default_factory=list)
    height: int = 0

    @property
    def window_start(self) -> date:
        return self.dates[0]

    @property
    def width(self) -> int:
        return len(self.dates) * self.day_width

    def to_dict(self):
        return {
            "period": self.period,
            "start": self.dates[0].isoformat(),
            "end": self.dates[-1].isoformat(),
            "dates": [d.isoformat() for d in self.dates],
            "dayWidth": self.day_width,
            "rowHeight": self.row_height,
            "width": self.width,
            "height": self.height,
            "bars": [b.to_dict() for b in self.bars],
            "connectors": [c.to_dict() for c in self.connectors],
        }


def layout_timeline(
    tasks: Sequence[Task],
    period: str = "month",
    reference: Optional[date] = None,
    config: Optional[TimelineConfig] = None,
) -> TimelineLayout:
    """Lay out ``tasks`` in the given order for one render pass.

    Tasks with a blank title or missing dates get no bar but keep their
    row slot, so rows of the remaining tasks do not shift.
    """
    cfg = config or TimelineConfig()
    dates = dates_in_window(period, reference)
    window_start = dates[0]
    rows = _row_index(tasks)
    out = TimelineLayout(
        period=period,
        dates=dates,
        day_width=cfg.day_width,
        row_height=cfg.row_height,
        height=len(tasks) * cfg.row_height + cfg.bottom_padding,
    )
    for i, t in enumerate(tasks):
        if not (t.title or "").strip() or not _placeable(t):
            continue
        pos = task_position(t, window_start, cfg.day_width)
        out.bars.append(Bar(
            task_id=t.id,
            project_id=t.project_id,
            title=t.title.strip(),
            status=t.status,
            progress=t.progress,
            row=i,
            top=row_top(i, cfg.row_height),
            offset=pos.offset,
            width=pos.width,
            color=status_color(t.status),
        ))
    for t in tasks:
        for dep_id in t.dependencies or []:
            line = dependency_line(t, dep_id, tasks, window_start, cfg, row_index=rows)
            if line:
                out.connectors.append(line)
    return out
