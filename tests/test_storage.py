import os
import sqlite3

import pytest

from projectplanner import config
from projectplanner.models import Project, clamp_progress, dependency_ids, parse_date, projects_from_data
from projectplanner.queries import available_dependencies, filter_projects, filter_tasks, is_overdue, status_counts
from projectplanner.seed import sample_projects
from projectplanner.storage import (
    InvalidPayloadError,
    MalformedDataError,
    ProjectStorage,
    StorageError,
    _read_only_uri,
)


def test_load_missing_database_is_not_found(storage):
    assert storage.load() is None
    assert not os.path.exists(storage.db_path)


def test_load_without_key_is_not_found(storage, db_path):
    sqlite3.connect(db_path).close()
    assert storage.load() is None


def test_save_then_load(storage):
    data = sample_projects()
    storage.save(data)
    assert storage.load() == data
    # Whole collection rewritten under the single key
    storage.save(data[:1])
    assert [p['id'] for p in storage.load()] == ['1']


def test_save_rejects_non_list_before_writing(storage):
    with pytest.raises(InvalidPayloadError):
        storage.save({'projects': []})
    assert not os.path.exists(storage.db_path)


def test_load_rejects_non_array(storage, db_path):
    storage.save([])
    conn = sqlite3.connect(db_path)
    try:
        conn.execute("UPDATE kv_store SET value='{}' WHERE key='projects'")
        conn.commit()
    finally:
        conn.close()
    with pytest.raises(MalformedDataError):
        storage.load()


def test_read_only_storage_refuses_writes(db_path):
    ProjectStorage(db_path, read_only=False).save([])
    ro = ProjectStorage(db_path, read_only=True)
    with pytest.raises(StorageError):
        ro.save([])


def test_read_only_uri():
    assert _read_only_uri('//server/share/db.sqlite') == 'file:////server/share/db.sqlite?mode=ro'
    assert _read_only_uri('\\\\server\\share\\db.sqlite') == 'file:////server/share/db.sqlite?mode=ro'
    assert _read_only_uri('/data/db.sqlite') == 'file:///data/db.sqlite?mode=ro'


def test_db_path_precedence(tmp_path, monkeypatch):
    monkeypatch.delenv('PROJECT_DB_PATH', raising=False)
    assert config.get_db_path(str(tmp_path)) == os.path.join(str(tmp_path), 'project_data.db')
    (tmp_path / 'db_path.txt').write_text('/shared/planner.db\n', encoding='utf-8')
    assert config.get_db_path(str(tmp_path)) == '/shared/planner.db'
    monkeypatch.setenv('PROJECT_DB_PATH', ' /env/planner.db ')
    assert config.get_db_path(str(tmp_path)) == '/env/planner.db'


def test_timeline_config_from_env(monkeypatch):
    monkeypatch.setenv('TIMELINE_DAY_WIDTH', '24')
    monkeypatch.setenv('TIMELINE_ROW_HEIGHT', 'tall')
    cfg = config.TimelineConfig.from_env()
    assert cfg.day_width == 24
    assert cfg.row_height == config.ROW_HEIGHT


def test_parse_date_formats():
    assert parse_date('2024-02-01') == parse_date('02/01/2024') == parse_date('02-01-2024')
    assert parse_date('2024-02-01T10:00:00.000Z').isoformat() == '2024-02-01'
    assert parse_date('') is None
    assert parse_date('soon') is None


def test_round_trip_keeps_stored_keys():
    raw = sample_projects()[0]
    raw['tasks'][1]['dependencies'] = ['1-1']
    raw['teamMembers'] = ['Ana']
    project = Project.from_dict(raw)
    assert project.tasks[1].dependencies == ['1-1']
    assert project.to_dict() == raw


def test_from_dict_tolerates_legacy_fields():
    p = Project.from_dict({
        'id': 7, 'title': 'Legacy', 'status': 'archived', 'startDate': '01/15/2024',
        'tasks': [{'id': 1, 'title': 'T', 'dependencies': 'a, b', 'progress': '140'}],
    })
    assert p.id == '7'
    assert p.status == 'planning'
    assert p.tasks[0].project_id == '7'
    assert p.tasks[0].dependencies == ['a', 'b']
    assert p.tasks[0].progress == 100


@pytest.mark.parametrize('value, expected', [
    (float('inf'), 100), (float('-inf'), 0), (float('nan'), 0), ('42.5', 42), (None, 0),
])
def test_clamp_progress_handles_non_finite(value, expected):
    assert clamp_progress(value) == expected


@pytest.mark.parametrize('value, expected', [
    ('a, b', ['a', 'b']),
    ('1700000000000-1700000000001', ['1700000000000-1700000000001']),
    (5, ['5']),
    ([], None),
    (None, None),
])
def test_dependency_ids(value, expected):
    assert dependency_ids(value) == expected


def test_queries_on_sample_data():
    projects = projects_from_data(sample_projects())
    assert [p.id for p in filter_projects(projects, 'active')] == ['1']
    assert len(filter_projects(projects, 'all')) == 2
    tasks = [t for p in projects for t in p.tasks]
    assert [t.id for t in filter_tasks(tasks, project_id='2')] == ['2-1', '2-2']
    assert [t.id for t in filter_tasks(tasks, status='todo')] == ['1-4']
    assert status_counts(projects[0].tasks) == {'todo': 1, 'in-progress': 2, 'completed': 1}
    content = projects[1].tasks[1]
    assert is_overdue(content, parse_date('2024-03-02'))
    assert not is_overdue(content, parse_date('2024-03-01'))
    assert not is_overdue(projects[1].tasks[0], parse_date('2030-01-01'))
    assert [t.id for t in available_dependencies(projects[0], projects[0].tasks[0])] == ['1-2', '1-3', '1-4']
