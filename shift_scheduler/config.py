"""Centralized knobs for the shift engine. Tweak values here instead of touching the solver."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

# ---------------------------------------------------------------------------
# Calendar configuration
# ---------------------------------------------------------------------------
DAY_NAMES = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
WEEKEND_DAYS = {"saturday", "sunday"}

WEEKS_PER_MONTH = 4.33  # Pro-rates weekly hour caps and targets for monthly runs

# ---------------------------------------------------------------------------
# Shift kind lookup table (the only place shift times and hours are defined)
# ---------------------------------------------------------------------------
# start/end are display labels; start_hour/end_hour drive rest-time math.
# end_hour < start_hour means the shift crosses midnight.
SHIFT_KIND_TIMES: Dict[str, Dict[str, object]] = {
    "morning": {"start": "07:00", "end": "15:00", "start_hour": 7, "end_hour": 15, "hours": 8},
    "afternoon": {"start": "15:00", "end": "23:00", "start_hour": 15, "end_hour": 23, "hours": 8},
    "night": {"start": "23:00", "end": "07:00", "start_hour": 23, "end_hour": 7, "hours": 8},
    "day": {"start": "07:00", "end": "19:00", "start_hour": 7, "end_hour": 19, "hours": 12},
    "fullday": {"start": "00:00", "end": "23:59", "start_hour": 0, "end_hour": 24, "hours": 24},
}

# ---------------------------------------------------------------------------
# Staffing defaults
# ---------------------------------------------------------------------------
DEFAULT_MINIMUM_STAFF = 2
DEFAULT_MAXIMUM_STAFF = 4
FULLDAY_MINIMUM_STAFF = 1
FULLDAY_MAXIMUM_STAFF = 2

DEFAULT_MAX_CONSECUTIVE_DAYS = 3
DEFAULT_MIN_REST_HOURS = 12
DEFAULT_MAX_HOURS_PER_WEEK = 40
DEFAULT_MIN_HOURS_PER_WEEK = 20

# ---------------------------------------------------------------------------
# Priority ranking (all terms share one scale so they add up meaningfully)
# ---------------------------------------------------------------------------
PRIORITY_PER_REQUIRED_SKILL = 20
PRIORITY_SKILL_SCARCITY = 25  # Fewer than 2x minimum staff hold a required skill
SKILL_SCARCITY_RATIO = 2
PRIORITY_LOW_FLEXIBILITY = 20  # max/min staffing ratio under LOW_FLEXIBILITY_RATIO
LOW_FLEXIBILITY_RATIO = 1.5
PRIORITY_WEEKEND = 15
PRIORITY_PER_MINIMUM_STAFF = 8
PRIORITY_SMALL_POOL = 30  # Eligible pool under SMALL_POOL_RATIO x minimum staff
SMALL_POOL_RATIO = 1.5
MONTH_EARLY_DATE_HORIZON = 32  # Monthly bonus: max(0, 32 - day_of_month) * 0.5
MONTH_EARLY_DATE_WEIGHT = 0.5

KIND_CRITICALITY: Dict[str, int] = {
    "fullday": 30,
    "night": 25,
    "day": 15,
    "morning": 10,
    "afternoon": 5,
}

# ---------------------------------------------------------------------------
# Constraint penalties (subtracted from a candidate's score, never a rejection)
# ---------------------------------------------------------------------------
CONSECUTIVE_DAYS_PENALTY = 10
REST_TIME_PENALTY = 15
MAX_HOURS_PENALTY = 20
WEEKLY_PENALTY_SCALE = 1.0
MONTHLY_PENALTY_SCALE = 0.5  # Longer horizon tolerates more local flexing

# ---------------------------------------------------------------------------
# Candidate scoring
# ---------------------------------------------------------------------------
BASE_CANDIDATE_SCORE = 50
NON_PREFERRED_SHIFT_CAP = -3
PREFERRED_DAY_OFF_CAP = -5
NO_MATCHING_SKILL_PENALTY = 5
HOLIDAY_PENALTY = 30

UNDER_TARGET_HOURS_RATE = 2  # Bonus per hour short of the desired hours
UNDER_TARGET_HOURS_CAP = 20
OVER_TARGET_HOURS_RATE = 1
OVER_TARGET_HOURS_CAP = 10

UNDER_ASSIGNED_SHIFT_RATE = 3  # Bonus per shift below the mean shifts per staff
UNDER_ASSIGNED_SHIFT_CAP = 15
OVER_ASSIGNED_SHIFT_RATE = 2
OVER_ASSIGNED_SHIFT_CAP = 10

TIE_BREAK_JITTER = 1.0  # Upper bound of the random perturbation added to every score
DEFAULT_SEED = 20240101


@dataclass(frozen=True)
class ScoringWeights:
    """Tunable weights applied to the preference components of a candidate score."""

    preferred_shift: float = 10.0
    non_preferred_shift: float = -5.0
    preferred_day_off: float = -15.0
    matching_skill: float = 5.0
    needs_more_hours: float = 8.0


DEFAULT_WEIGHTS = ScoringWeights()
