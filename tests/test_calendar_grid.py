# tests/test_calendar_grid.py

from __future__ import annotations

from datetime import date

from taskdeck.calendar_grid import GRID_CELLS, month_grid, shift_month


def test_october_2026_grid() -> None:
    grid = month_grid(2026, 10, today=date(2026, 10, 19))

    assert grid.title == "October 2026"
    assert len(grid.cells) == GRID_CELLS
    assert [c.day for c in grid.cells[:5]] == [27, 28, 29, 30, 1]
    assert [c.in_month for c in grid.cells[:5]] == [False, False, False, False, True]
    assert sum(c.in_month for c in grid.cells) == 31
    assert [c.date for c in grid.cells if c.is_today] == [date(2026, 10, 19)]
    assert grid.cells[-1].date == date(2026, 11, 7)
    assert len(grid.weeks()) == 6
    assert all(len(w) == 7 for w in grid.weeks())


def test_month_starting_on_sunday_has_no_leading_days() -> None:
    grid = month_grid(2026, 2, today=date(2026, 10, 19))

    assert grid.cells[0].date == date(2026, 2, 1)
    assert grid.cells[0].in_month
    assert not any(c.is_today for c in grid.cells)
    assert sum(not c.in_month for c in grid.cells) == 14


def test_shift_month_crosses_years() -> None:
    assert shift_month(2026, 1, -1) == (2025, 12)
    assert shift_month(2026, 12, 1) == (2027, 1)
    assert shift_month(2026, 10, 0) == (2026, 10)
    assert shift_month(2026, 10, -22) == (2024, 12)
