"""Dataclasses and type definitions shared across the shift engine modules."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple

from shift_scheduler.config import (
    DAY_NAMES,
    DEFAULT_MAX_CONSECUTIVE_DAYS,
    DEFAULT_MAX_HOURS_PER_WEEK,
    DEFAULT_MAXIMUM_STAFF,
    DEFAULT_MIN_HOURS_PER_WEEK,
    DEFAULT_MIN_REST_HOURS,
    DEFAULT_MINIMUM_STAFF,
    DEFAULT_WEIGHTS,
    SHIFT_KIND_TIMES,
    ScoringWeights,
)


class ShiftKind(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    NIGHT = "night"
    DAY = "day"  # 12-hour weekend day shift
    FULLDAY = "fullday"  # 24-hour shift

    @classmethod
    def parse(cls, value: str) -> "ShiftKind":
        """Resolve a shift kind from a case-insensitive label.

        Raises:
            ValueError: If the label does not name a known shift kind.
        """
        key = str(value).strip().lower()
        for kind in cls:
            if kind.value == key:
                return kind
        valid = ", ".join(kind.value for kind in cls)
        raise ValueError(f"Unknown shift kind '{value}'. Use one of: {valid}.")

    @property
    def hours(self) -> float:
        return float(SHIFT_KIND_TIMES[self.value]["hours"])

    @property
    def start_hour(self) -> int:
        return int(SHIFT_KIND_TIMES[self.value]["start_hour"])

    @property
    def end_hour(self) -> int:
        return int(SHIFT_KIND_TIMES[self.value]["end_hour"])

    @property
    def start_time(self) -> str:
        return str(SHIFT_KIND_TIMES[self.value]["start"])

    @property
    def end_time(self) -> str:
        return str(SHIFT_KIND_TIMES[self.value]["end"])

    @property
    def crosses_midnight(self) -> bool:
        return self.end_hour < self.start_hour


class PeriodKind(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def normalize_day_name(name: str) -> str:
    """Normalize a day-of-week label ("Mon", "MONDAY", " monday ") to its full lowercase name.

    Raises:
        ValueError: If the label does not identify a day of the week.
    """
    key = str(name).strip().lower()
    for day in DAY_NAMES:
        if key == day or (len(key) >= 3 and day.startswith(key)):
            return day
    raise ValueError(f"Invalid day '{name}'. Use one of: {', '.join(DAY_NAMES)}.")


def day_name_for(value: datetime.date) -> str:
    return DAY_NAMES[value.weekday()]


@dataclass(frozen=True)
class StaffPreferences:
    desired_hours_per_week: float = 40.0
    preferred_shifts: Tuple[ShiftKind, ...] = ()
    preferred_days_off: FrozenSet[str] = frozenset()
    holidays: FrozenSet[datetime.date] = frozenset()


@dataclass(frozen=True)
class StaffMember:
    id: str
    name: str
    skills: FrozenSet[str] = frozenset()
    is_active: bool = True
    preferences: StaffPreferences = field(default_factory=StaffPreferences)
    email: str = ""


@dataclass(frozen=True)
class StaffRequirement:
    minimum: int = DEFAULT_MINIMUM_STAFF
    maximum: int = DEFAULT_MAXIMUM_STAFF


@dataclass(frozen=True)
class DayPolicy:
    """Which shift kinds run on one day of the week, with their skill and staffing needs."""

    enabled_kinds: Tuple[ShiftKind, ...] = ()
    skill_requirements: Dict[ShiftKind, Tuple[str, ...]] = field(default_factory=dict)
    staff_requirements: Dict[ShiftKind, StaffRequirement] = field(default_factory=dict)

    def skills_for(self, kind: ShiftKind) -> Tuple[str, ...]:
        return tuple(self.skill_requirements.get(kind, ()))

    def requirement_for(self, kind: ShiftKind) -> StaffRequirement:
        return self.staff_requirements.get(kind, StaffRequirement())


@dataclass(frozen=True)
class GlobalPolicy:
    max_consecutive_shift_days: int = DEFAULT_MAX_CONSECUTIVE_DAYS
    min_rest_hours: float = DEFAULT_MIN_REST_HOURS
    max_hours_per_week: float = DEFAULT_MAX_HOURS_PER_WEEK
    min_hours_per_week: float = DEFAULT_MIN_HOURS_PER_WEEK  # Reporting only
    require_skill_match: bool = True
    minimum_skills_required: bool = True  # With require_skill_match: skills are hard, not soft
    enforce_hard_constraints: bool = False  # Two-pass filter mode (strict, then relaxed) before emergency fill
    weights: ScoringWeights = DEFAULT_WEIGHTS


@dataclass
class ShiftInstance:
    id: str
    kind: ShiftKind
    date: datetime.date
    day: str
    required_skills: Tuple[str, ...]
    minimum_staff: int
    maximum_staff: int
    assigned_staff: List[str] = field(default_factory=list)

    @property
    def hours(self) -> float:
        return self.kind.hours

    @property
    def start_time(self) -> str:
        return self.kind.start_time

    @property
    def end_time(self) -> str:
        return self.kind.end_time

    @property
    def is_understaffed(self) -> bool:
        return len(self.assigned_staff) < self.minimum_staff

    def assign(self, staff_id: str) -> None:
        if staff_id in self.assigned_staff:
            raise ValueError(f"Staff '{staff_id}' is already assigned to shift '{self.id}'.")
        if len(self.assigned_staff) >= self.maximum_staff:
            raise ValueError(f"Shift '{self.id}' is already at its maximum of {self.maximum_staff} staff.")
        self.assigned_staff.append(staff_id)

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "type": self.kind.value,
            "date": self.date.isoformat(),
            "day": self.day,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "requiredSkills": list(self.required_skills),
            "minimumStaff": self.minimum_staff,
            "maximumStaff": self.maximum_staff,
            "assignedStaff": list(self.assigned_staff),
        }


@dataclass
class GenerationReport:
    """What the caller needs to surface after a run: gaps, fallbacks and skill mismatches."""

    understaffed_shift_ids: List[str] = field(default_factory=list)
    emergency_assignments: List[Tuple[str, str]] = field(default_factory=list)  # (shift_id, staff_id)
    skill_mismatches: List[Tuple[str, str]] = field(default_factory=list)  # (shift_id, staff_id)
    total_assignments: int = 0
    warnings: List[str] = field(default_factory=list)

    @property
    def understaffed_count(self) -> int:
        return len(self.understaffed_shift_ids)

    def to_dict(self) -> Dict[str, object]:
        return {
            "understaffedShiftIds": list(self.understaffed_shift_ids),
            "emergencyAssignments": [list(pair) for pair in self.emergency_assignments],
            "skillMismatches": [list(pair) for pair in self.skill_mismatches],
            "totalAssignments": self.total_assignments,
            "warnings": list(self.warnings),
        }


@dataclass
class Schedule:
    id: str
    period_kind: PeriodKind
    period_start: datetime.date
    shifts: List[ShiftInstance]
    created_at: datetime.datetime
    updated_at: datetime.datetime
    is_published: bool = False
    report: GenerationReport = field(default_factory=GenerationReport)

    @property
    def week_start_date(self) -> datetime.date:
        return self.period_start

    @property
    def month_start_date(self) -> Optional[datetime.date]:
        return self.period_start if self.period_kind is PeriodKind.MONTHLY else None

    def shifts_for(self, staff_id: str) -> List[ShiftInstance]:
        return [shift for shift in self.shifts if staff_id in shift.assigned_staff]

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "id": self.id,
            "scheduleType": self.period_kind.value,
            "weekStartDate": self.week_start_date.isoformat(),
            "shifts": [shift.to_dict() for shift in self.shifts],
            "isPublished": self.is_published,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "report": self.report.to_dict(),
        }
        if self.month_start_date is not None:
            payload["monthStartDate"] = self.month_start_date.isoformat()
        return payload
