"""Quarterly estimated / advance tax due dates and reminders.

Each jurisdiction has a fixed annual calendar. A date falling on a weekend
moves to the following Monday.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple

from domain.exceptions import UnsupportedJurisdictionError

URGENT_DAYS = 30
PAST_DUE_WINDOW_DAYS = 30
REMINDER_INFO_DAYS = 60

# (quarter, month, day, year offset from the tax year)
DUE_DATE_CALENDARS: Dict[str, List[Tuple[int, int, int, int]]] = {
    # IRS estimated tax (Form 1040-ES)
    "US": [(1, 4, 15, 0), (2, 6, 15, 0), (3, 9, 15, 0), (4, 1, 15, 1)],
    # Advance tax instalments, financial year starting in April
    "IN": [(1, 6, 15, 0), (2, 9, 15, 0), (3, 12, 15, 0), (4, 3, 15, 1)],
}


def roll_forward_weekend(day: date) -> date:
    """Move a Saturday or Sunday to the next Monday."""
    weekday = day.weekday()
    if weekday >= 5:
        return day + timedelta(days=7 - weekday)
    return day


@dataclass(frozen=True)
class DueDate:
    """One instalment due date relative to a reference day."""
    quarter: int
    tax_year: int
    due_date: date
    days_until: int

    @property
    def period(self) -> str:
        return f"Q{self.quarter} {self.tax_year}"

    @property
    def is_past_due(self) -> bool:
        return self.days_until < 0

    @property
    def is_urgent(self) -> bool:
        return self.days_until <= URGENT_DAYS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "due_date": self.due_date,
            "days_until": self.days_until,
            "is_urgent": self.is_urgent,
            "is_past_due": self.is_past_due,
        }


class DueDateTracker:
    """Looks up upcoming and recently missed instalment dates."""

    def __init__(self, calendars: Optional[Dict[str, List[Tuple[int, int, int, int]]]] = None):
        self.calendars = calendars or DUE_DATE_CALENDARS

    def _calendar(self, jurisdiction: str) -> List[Tuple[int, int, int, int]]:
        code = (jurisdiction or "").strip().upper()
        if code not in self.calendars:
            raise UnsupportedJurisdictionError(jurisdiction, tuple(self.calendars))
        return self.calendars[code]

    def due_date_for(self, jurisdiction: str, tax_year: int, quarter: int) -> date:
        """Due date of one quarter's instalment for a tax year."""
        for q, month, day, offset in self._calendar(jurisdiction):
            if q == quarter:
                return roll_forward_weekend(date(tax_year + offset, month, day))
        raise ValueError(f"Quarter must be 1-4, got {quarter!r}")

    def cycle(self, jurisdiction: str, tax_year: int, today: date) -> List[DueDate]:
        """All four instalments of one tax year."""
        dates = []
        for q, month, day, offset in self._calendar(jurisdiction):
            due = roll_forward_weekend(date(tax_year + offset, month, day))
            dates.append(DueDate(
                quarter=q,
                tax_year=tax_year,
                due_date=due,
                days_until=(due - today).days,
            ))
        return dates

    def get_upcoming_due_dates(
        self,
        jurisdiction: str,
        today: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        """
        Upcoming and recently missed due dates.

        Covers the previous and current cycle: every date still ahead, plus
        dates missed within the last 30 days.

        Returns:
            Dicts with period, due_date, days_until, is_urgent and
            is_past_due, soonest (most overdue) first.
        """
        today = today or date.today()
        dates: List[DueDate] = []
        for tax_year in (today.year - 1, today.year):
            for due in self.cycle(jurisdiction, tax_year, today):
                if due.days_until >= -PAST_DUE_WINDOW_DAYS:
                    dates.append(due)

        dates.sort(key=lambda d: d.days_until)
        return [d.to_dict() for d in dates]

    def next_due_date(self, jurisdiction: str, today: Optional[date] = None) -> date:
        """The first due date on or after today."""
        today = today or date.today()
        for tax_year in (today.year - 1, today.year, today.year + 1):
            for due in self.cycle(jurisdiction, tax_year, today):
                if due.days_until >= 0:
                    return due.due_date
        # Unreachable with a four-instalment calendar
        raise ValueError(f"No upcoming due date for {jurisdiction}")


def build_reminders(upcoming: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Turn due dates into user-facing reminders.

    Past due dates become errors, urgent ones warnings and dates within 60
    days informational notices; later dates produce nothing.
    """
    reminders = []
    for item in upcoming:
        days = item["days_until"]
        if item["is_past_due"]:
            reminder = {
                "type": "error",
                "priority": "high",
                "message": f"{item['period']} taxes are {abs(days)} days overdue!",
                "action": "File and pay immediately to avoid penalties",
            }
        elif item["is_urgent"]:
            reminder = {
                "type": "warning",
                "priority": "high",
                "message": f"{item['period']} taxes due in {days} days",
                "action": "Prepare your quarterly tax payment",
            }
        elif days <= REMINDER_INFO_DAYS:
            reminder = {
                "type": "info",
                "priority": "medium",
                "message": f"{item['period']} taxes due in {days} days",
                "action": "Start gathering tax documents",
            }
        else:
            continue
        reminder["period"] = item["period"]
        reminder["due_date"] = item["due_date"]
        reminders.append(reminder)
    return reminders
