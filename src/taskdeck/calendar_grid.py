# src/taskdeck/calendar_grid.py

"""
Month grid for the calendar panel.

Always 6 rows x 7 columns (42 cells), weeks starting on Sunday: trailing days
of the previous month, the month itself, then leading days of the next month.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta

GRID_CELLS = 42
WEEKDAY_HEADERS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


@dataclass(frozen=True, slots=True)
class CalendarCell:
    date: date
    in_month: bool
    is_today: bool

    @property
    def day(self) -> int:
        return self.date.day


@dataclass(frozen=True, slots=True)
class MonthGrid:
    year: int
    month: int
    title: str
    cells: list[CalendarCell]

    def weeks(self) -> list[list[CalendarCell]]:
        return [self.cells[i : i + 7] for i in range(0, len(self.cells), 7)]


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    idx = year * 12 + (month - 1) + delta
    return idx // 12, idx % 12 + 1


def month_grid(year: int, month: int, today: date) -> MonthGrid:
    first = date(year, month, 1)
    # date.weekday(): Monday=0 .. Sunday=6; shift so Sunday starts the row.
    leading = (first.weekday() + 1) % 7
    start = first - timedelta(days=leading)

    cells = []
    for i in range(GRID_CELLS):
        d = start + timedelta(days=i)
        cells.append(
            CalendarCell(
                date=d,
                in_month=(d.year, d.month) == (year, month),
                is_today=d == today,
            )
        )
    return MonthGrid(
        year=year,
        month=month,
        title=f"{calendar.month_name[month]} {year}",
        cells=cells,
    )
