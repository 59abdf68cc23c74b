"""CSV loading utilities for per-day shift requirements.

Each row enables one shift kind on one day of the week and states how many
staff it needs (e.g. "monday,night,2,3,nursing;emergency care"). Days without
any row run no shifts.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple

import pandas as pd

from shift_scheduler.config import DAY_NAMES
from shift_scheduler.data_access.staff_loader import _coerce_numeric, _normalize_columns, _parse_list
from shift_scheduler.domain.models import DayPolicy, ShiftKind, StaffRequirement, normalize_day_name


def load_day_policies(path: Path) -> Dict[str, DayPolicy]:
    """Load per-day shift requirements from a CSV file.

    Expected CSV columns:
    - day: day of the week ("monday" or "Mon")
    - kind: shift kind (morning, afternoon, night, day, fullday)
    - minimum: minimum staff for the shift
    - maximum: maximum staff for the shift
    - skills: optional semicolon/comma-separated required skills

    Returns:
        A DayPolicy for every day of the week, keyed by lowercase day name.

    Raises:
        FileNotFoundError: If the CSV file doesn't exist.
        ValueError: If required columns are missing, a row is invalid, a
            (day, kind) pair repeats, or minimum exceeds maximum.

    Example:
        >>> policies = load_day_policies(Path("requirements.csv"))
        >>> policies["saturday"].enabled_kinds  # (ShiftKind.DAY, ShiftKind.NIGHT)
    """
    if not path.exists():
        raise FileNotFoundError(f"Requirements CSV not found: {path}")

    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [col.strip() for col in df.columns]
    column_map = _normalize_columns(df)

    def require_column(name: str) -> str:
        if name not in column_map:
            raise ValueError(f"Required column '{name}' not found in {path}")
        return column_map[name]

    day_col = require_column("day")
    kind_col = require_column("kind")
    min_col = require_column("minimum")
    max_col = require_column("maximum")
    skills_col = column_map.get("skills")

    enabled: Dict[str, List[ShiftKind]] = {day: [] for day in DAY_NAMES}
    skills: Dict[str, Dict[ShiftKind, Tuple[str, ...]]] = {day: {} for day in DAY_NAMES}
    staffing: Dict[str, Dict[ShiftKind, StaffRequirement]] = {day: {} for day in DAY_NAMES}

    for _, row in df.iterrows():
        day = normalize_day_name(row[day_col])
        kind = ShiftKind.parse(row[kind_col])
        record = f"{day} {kind.value}"
        if kind in enabled[day]:
            raise ValueError(f"Duplicate requirement row for {record}")

        minimum = _coerce_numeric(row[min_col], min_col, record)
        maximum = _coerce_numeric(row[max_col], max_col, record)
        if not minimum.is_integer() or not maximum.is_integer():
            raise ValueError(f"Staffing bounds for {record} must be whole numbers (got {minimum}, {maximum})")
        if minimum < 0 or minimum > maximum:
            raise ValueError(f"Invalid staffing bounds for {record}: minimum {minimum:g}, maximum {maximum:g}")

        enabled[day].append(kind)
        staffing[day][kind] = StaffRequirement(minimum=int(minimum), maximum=int(maximum))
        skills[day][kind] = tuple(skill.lower() for skill in _parse_list(row[skills_col])) if skills_col else ()

    return {
        day: DayPolicy(
            enabled_kinds=tuple(enabled[day]),
            skill_requirements=skills[day],
            staff_requirements=staffing[day],
        )
        for day in DAY_NAMES
    }
