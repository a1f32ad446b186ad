import os
from datetime import date

import pytest

os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')

from PyQt5.QtCore import QCoreApplication

from projectplanner.models import Task
from projectplanner.storage import ProjectStorage
from projectplanner.store import ProjectStore

app = QCoreApplication.instance() or QCoreApplication([])

FIXED_NOW = 1700000000.0  # 2023-11-14, ids start at 1700000000000


def make_task(tid, status='todo', deps=None, progress=0, start=date(2024, 3, 1), end=date(2024, 3, 5),
              project_id='P', title=None):
    return Task(
        id=tid,
        title=title if title is not None else f'Task {tid}',
        project_id=project_id,
        start_date=start,
        end_date=end,
        status=status,
        dependencies=deps,
        progress=progress,
    )


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / 'project_data.db')


@pytest.fixture
def storage(db_path):
    return ProjectStorage(db_path, read_only=False)


@pytest.fixture
def store(storage):
    """Store seeded with the sample data (first run on an empty database)."""
    return ProjectStore(storage, clock=lambda: FIXED_NOW)


@pytest.fixture
def empty_store(store):
    store.save_projects([])
    return store


@pytest.fixture
def project(empty_store):
    return empty_store.create_project({
        'title': 'Planner',
        'status': 'active',
        'startDate': '2024-03-01',
        'endDate': '2024-04-30',
    })
