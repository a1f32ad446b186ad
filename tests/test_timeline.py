from datetime import date

import pytest

from conftest import make_task
from projectplanner.config import TimelineConfig
from projectplanner.timeline import (
    dates_in_window,
    dependency_line,
    layout_timeline,
    row_top,
    status_color,
    task_position,
)

WINDOW_START = date(2024, 3, 1)


def test_week_window():
    dates = dates_in_window('week', date(2024, 3, 10))
    assert dates[0] == date(2024, 3, 3)
    assert dates[-1] == date(2024, 3, 31)
    assert len(dates) == 29
    assert all((b - a).days == 1 for a, b in zip(dates, dates[1:]))


def test_month_window_clamps_short_months():
    dates = dates_in_window('month', date(2024, 3, 31))
    assert dates[0] == date(2024, 2, 29)
    assert dates[-1] == date(2024, 6, 30)
    assert len(dates) == 123


def test_quarter_window():
    dates = dates_in_window('quarter', date(2024, 1, 15))
    assert dates[0] == date(2023, 10, 15)
    assert dates[-1] == date(2024, 10, 15)


def test_unknown_period():
    with pytest.raises(ValueError):
        dates_in_window('year', date(2024, 1, 1))


def test_task_at_window_start_has_zero_offset():
    t = make_task('A', start=WINDOW_START, end=date(2024, 3, 5))
    pos = task_position(t, WINDOW_START, 40)
    assert pos.offset == 0
    assert pos.width == 160


def test_task_before_window_is_clamped():
    t = make_task('A', start=date(2024, 2, 20), end=date(2024, 2, 25))
    pos = task_position(t, WINDOW_START, 40)
    assert pos.offset == 0
    assert pos.width == 200


def test_offset_in_day_columns():
    t = make_task('A', start=date(2024, 3, 11), end=date(2024, 3, 12))
    assert task_position(t, WINDOW_START, 40).offset == 400
    assert task_position(t, WINDOW_START, 10).offset == 100


@pytest.mark.parametrize('end', [date(2024, 3, 5), date(2024, 3, 1)])
def test_zero_or_negative_duration_is_one_day_wide(end):
    t = make_task('A', start=date(2024, 3, 5), end=end)
    assert task_position(t, WINDOW_START, 40).width == 40


def test_row_top():
    assert row_top(0, 60) == 0
    assert row_top(3, 60) == 180


def test_dependency_line_is_l_shaped():
    a = make_task('A', start=date(2024, 3, 1), end=date(2024, 3, 5))
    b = make_task('B', start=date(2024, 3, 7), end=date(2024, 3, 10), deps=['A'])
    line = dependency_line(b, 'A', [a, b], WINDOW_START)
    assert (line.from_x, line.from_y) == (160, 25)
    assert (line.to_x, line.to_y) == (240, 85)
    assert line.path() == [(160, 25), (240, 25), (240, 85)]
    assert line.arrow == (234, 79)
    assert line.horizontal_run == 80
    assert line.vertical_run == 60
    assert line.conflict is False


def test_dependency_line_short_run_and_conflict():
    a = make_task('A', start=date(2024, 3, 1), end=date(2024, 3, 10))
    b = make_task('B', start=date(2024, 3, 5), end=date(2024, 3, 12), deps=['A'])
    line = dependency_line(b, 'A', [a, b], WINDOW_START)
    assert line.horizontal_run == 20
    assert line.conflict is True
    # Stub of horizontal_run first, then back to the dependent's start column
    assert line.path() == [(360, 25), (380, 25), (160, 25), (160, 85)]
    assert line.path()[1][0] - line.from_x == line.horizontal_run


def test_dependency_below_dependent_is_not_drawn():
    a = make_task('A')
    b = make_task('B', deps=['A'])
    assert dependency_line(b, 'A', [b, a], WINDOW_START) is None


def test_dependency_outside_view_is_not_drawn():
    b = make_task('B', deps=['A'])
    assert dependency_line(b, 'A', [b], WINDOW_START) is None


def test_layout_rows_follow_input_order():
    a = make_task('A', status='completed', start=date(2024, 3, 1), end=date(2024, 3, 5))
    blank = make_task('X', title='   ')
    b = make_task('B', status='in-progress', progress=50, deps=['A'],
                  start=date(2024, 3, 7), end=date(2024, 3, 10))
    cfg = TimelineConfig(day_width=40, row_height=60)
    layout = layout_timeline([a, blank, b], 'week', date(2024, 3, 8), cfg)
    assert layout.window_start == WINDOW_START
    assert [bar.task_id for bar in layout.bars] == ['A', 'B']
    assert [bar.row for bar in layout.bars] == [0, 2]
    assert layout.bars[1].top == 120
    assert layout.bars[1].color == status_color('in-progress') == '#f59e0b'
    assert layout.height == 3 * 60 + 40
    assert layout.width == len(layout.dates) * 40
    assert len(layout.connectors) == 1
    assert layout.connectors[0].to_y == 145


def test_layout_is_deterministic():
    tasks = [make_task('A'), make_task('B', deps=['A'])]
    one = layout_timeline(tasks, 'month', date(2024, 3, 10)).to_dict()
    two = layout_timeline(tasks, 'month', date(2024, 3, 10)).to_dict()
    assert one == two
