"""Expand per-weekday policies into concrete shift instances for a week or a month."""

from __future__ import annotations

import calendar
import datetime
from typing import Iterable, List, Mapping

from shift_scheduler.domain.models import DayPolicy, ShiftInstance, day_name_for


def week_dates(week_start: datetime.date) -> List[datetime.date]:
    if week_start.weekday() != 0:
        raise ValueError(f"Week start {week_start.isoformat()} is a {day_name_for(week_start)}; expected a Monday.")
    return [week_start + datetime.timedelta(days=offset) for offset in range(7)]


def month_start(value: datetime.date) -> datetime.date:
    return value.replace(day=1)


def month_dates(value: datetime.date) -> List[datetime.date]:
    """All calendar dates of the month containing ``value``."""
    first = month_start(value)
    days_in_month = calendar.monthrange(first.year, first.month)[1]
    return [first + datetime.timedelta(days=offset) for offset in range(days_in_month)]


def build_shifts(dates: Iterable[datetime.date], day_policies: Mapping[str, DayPolicy]) -> List[ShiftInstance]:
    shifts: List[ShiftInstance] = []
    for date in dates:
        day = day_name_for(date)
        policy = day_policies[day]
        for kind in policy.enabled_kinds:
            requirement = policy.requirement_for(kind)
            shifts.append(
                ShiftInstance(
                    id=f"{date.isoformat()}-{kind.value}",
                    kind=kind,
                    date=date,
                    day=day,
                    required_skills=policy.skills_for(kind),
                    minimum_staff=requirement.minimum,
                    maximum_staff=requirement.maximum,
                )
            )
    return shifts
