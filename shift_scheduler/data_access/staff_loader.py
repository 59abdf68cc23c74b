"""CSV loading utilities for the staff roster."""

from __future__ import annotations

import datetime
import re
from pathlib import Path
from typing import Dict, List, Optional, Set

import pandas as pd

from shift_scheduler.domain.models import ShiftKind, StaffMember, StaffPreferences, normalize_day_name

TRUE_VALUES = {"1", "true", "yes", "y", "active"}
FALSE_VALUES = {"0", "false", "no", "n", "inactive"}


def _normalize_columns(df: pd.DataFrame) -> Dict[str, str]:
    """Create mapping from lowercase column names to original names."""
    normalized: Dict[str, str] = {}
    for column in df.columns:
        key = column.strip().lower()
        if key in normalized:
            raise ValueError(f"Duplicate column detected when normalizing headers: '{column}'")
        normalized[key] = column.strip()
    return normalized


def _parse_list(raw_value: Optional[str]) -> List[str]:
    """Split a semicolon/comma-separated cell into trimmed, non-empty entries."""
    if raw_value is None or pd.isna(raw_value):
        return []
    return [item.strip() for item in re.split(r"[;,]", str(raw_value)) if item.strip()]


def _coerce_numeric(value, column_name: str, record_name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(
            f"Invalid numeric value '{value}' for column '{column_name}' on record '{record_name}'"
        ) from None


def _coerce_bool(value, column_name: str, record_name: str) -> bool:
    if value is None or pd.isna(value):
        return True
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text.endswith(".0"):
        text = text[:-2]
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError(f"Invalid flag '{value}' for column '{column_name}' on record '{record_name}'")


def _parse_dates(raw_value, column_name: str, record_name: str) -> Set[datetime.date]:
    dates: Set[datetime.date] = set()
    for item in _parse_list(raw_value):
        try:
            dates.add(datetime.date.fromisoformat(item))
        except ValueError:
            raise ValueError(
                f"Invalid date '{item}' for column '{column_name}' on record '{record_name}' (expected YYYY-MM-DD)"
            ) from None
    return dates


def load_staff_roster(path: Path) -> List[StaffMember]:
    """Load the staff roster from a CSV file.

    Expected CSV columns:
    - id, name: required, ids must be unique
    - skills: semicolon/comma-separated skill tags (may be empty)
    - active: optional flag (defaults to active)
    - desired_hours: optional desired weekly hours (defaults to 40)
    - preferred_shifts: optional list of shift kinds (morning, afternoon, night, day, fullday)
    - preferred_days_off: optional list of day names ("Mon" or "monday")
    - holidays: optional list of YYYY-MM-DD dates
    - email: optional

    Raises:
        FileNotFoundError: If the CSV file doesn't exist.
        ValueError: If required columns are missing or a row is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Staff CSV not found: {path}")

    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [col.strip() for col in df.columns]
    column_map = _normalize_columns(df)

    def require_column(name: str) -> str:
        if name not in column_map:
            raise ValueError(f"Required column '{name}' not found in {path}")
        return column_map[name]

    id_col = require_column("id")
    name_col = require_column("name")
    skills_col = require_column("skills")
    active_col = column_map.get("active")
    hours_col = column_map.get("desired_hours")
    shifts_col = column_map.get("preferred_shifts")
    days_off_col = column_map.get("preferred_days_off")
    holidays_col = column_map.get("holidays")
    email_col = column_map.get("email")

    roster: List[StaffMember] = []
    seen: Set[str] = set()

    for _, row in df.iterrows():
        staff_id = str(row[id_col]).strip()
        name = str(row[name_col]).strip()
        if not staff_id:
            raise ValueError(f"Encountered staff row with empty id (name '{name}').")
        if not name:
            raise ValueError(f"Encountered staff row with empty name (id '{staff_id}').")
        if staff_id in seen:
            raise ValueError(f"Duplicate staff id detected: '{staff_id}'")
        seen.add(staff_id)

        desired_hours = 40.0
        if hours_col and str(row[hours_col]).strip():
            desired_hours = _coerce_numeric(row[hours_col], hours_col, name)

        preferences = StaffPreferences(
            desired_hours_per_week=desired_hours,
            preferred_shifts=tuple(ShiftKind.parse(kind) for kind in _parse_list(row[shifts_col])) if shifts_col else (),
            preferred_days_off=frozenset(normalize_day_name(day) for day in _parse_list(row[days_off_col]))
            if days_off_col
            else frozenset(),
            holidays=frozenset(_parse_dates(row[holidays_col], holidays_col, name)) if holidays_col else frozenset(),
        )

        is_active = True
        if active_col and str(row[active_col]).strip():
            is_active = _coerce_bool(row[active_col], active_col, name)

        roster.append(
            StaffMember(
                id=staff_id,
                name=name,
                skills=frozenset(skill.lower() for skill in _parse_list(row[skills_col])),
                is_active=is_active,
                preferences=preferences,
                email=str(row[email_col]).strip() if email_col else "",
            )
        )

    if not roster:
        raise ValueError(f"No staff rows found in {path}")
    return roster
