"""Default policies, override merging and input validation for generation runs."""

from __future__ import annotations

from dataclasses import fields, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional

from shift_scheduler.config import (
    DAY_NAMES,
    DEFAULT_MAXIMUM_STAFF,
    DEFAULT_MINIMUM_STAFF,
    FULLDAY_MAXIMUM_STAFF,
    FULLDAY_MINIMUM_STAFF,
    WEEKEND_DAYS,
    ScoringWeights,
)
from shift_scheduler.domain.models import (
    DayPolicy,
    GlobalPolicy,
    ShiftKind,
    StaffMember,
    StaffRequirement,
    normalize_day_name,
)

WEEKDAY_KINDS = (ShiftKind.MORNING, ShiftKind.AFTERNOON, ShiftKind.NIGHT)
WEEKEND_KINDS = (ShiftKind.DAY, ShiftKind.NIGHT)


def default_staff_requirements() -> Dict[ShiftKind, StaffRequirement]:
    requirements = {kind: StaffRequirement(DEFAULT_MINIMUM_STAFF, DEFAULT_MAXIMUM_STAFF) for kind in ShiftKind}
    requirements[ShiftKind.FULLDAY] = StaffRequirement(FULLDAY_MINIMUM_STAFF, FULLDAY_MAXIMUM_STAFF)
    return requirements


def default_day_policies() -> Dict[str, DayPolicy]:
    """Weekdays run morning/afternoon/night, weekends run 12h day plus night, no skill requirements."""
    policies: Dict[str, DayPolicy] = {}
    for day in DAY_NAMES:
        policies[day] = DayPolicy(
            enabled_kinds=WEEKEND_KINDS if day in WEEKEND_DAYS else WEEKDAY_KINDS,
            skill_requirements={kind: () for kind in ShiftKind},
            staff_requirements=default_staff_requirements(),
        )
    return policies


def _coerce_override(name: str, value: Any, default: Any) -> Any:
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise ValueError(f"Invalid value '{value}' for policy setting '{name}': expected true/false.")
        return value
    if isinstance(default, (int, float)):
        if isinstance(value, bool):
            raise ValueError(f"Invalid value '{value}' for policy setting '{name}': expected a number.")
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid value '{value}' for policy setting '{name}': expected a number.") from None
        return int(number) if isinstance(default, int) and number.is_integer() else number
    return value


def build_global_policy(overrides: Optional[Mapping[str, Any]] = None, base: Optional[GlobalPolicy] = None) -> GlobalPolicy:
    """Merge a partial settings mapping over the default policy.

    Unknown keys are ignored so older or newer configuration files still load.
    A ``weights`` entry may itself be a partial mapping of ScoringWeights fields.

    Raises:
        ValueError: If a known setting has a value of the wrong type.
    """
    policy = base or GlobalPolicy()
    if not overrides:
        return policy

    known = {f.name for f in fields(GlobalPolicy)} - {"weights"}
    changes: Dict[str, Any] = {}
    for key, value in overrides.items():
        if key in known and value is not None:
            changes[key] = _coerce_override(key, value, getattr(policy, key))

    raw_weights = overrides.get("weights")
    if isinstance(raw_weights, Mapping):
        weight_names = {f.name for f in fields(ScoringWeights)}
        weight_changes = {
            key: _coerce_override(f"weights.{key}", value, getattr(policy.weights, key))
            for key, value in raw_weights.items()
            if key in weight_names and value is not None
        }
        changes["weights"] = replace(policy.weights, **weight_changes)
    elif raw_weights is not None:
        raise ValueError("Policy setting 'weights' must be a mapping of weight names to numbers.")

    return replace(policy, **changes)


def validate_global_policy(policy: GlobalPolicy) -> None:
    if policy.max_consecutive_shift_days < 1:
        raise ValueError(
            f"max_consecutive_shift_days must be at least 1 (got {policy.max_consecutive_shift_days})."
        )
    if policy.min_rest_hours < 0:
        raise ValueError(f"min_rest_hours cannot be negative (got {policy.min_rest_hours}).")
    if policy.max_hours_per_week <= 0:
        raise ValueError(f"max_hours_per_week must be positive (got {policy.max_hours_per_week}).")


def validate_day_policies(day_policies: Mapping[str, DayPolicy]) -> Dict[str, DayPolicy]:
    """Check that every weekday is configured with consistent staffing bounds.

    Day keys are normalized ("Mon" -> "monday").

    Returns:
        The policies keyed by full lowercase day name.

    Raises:
        ValueError: If a day is missing or duplicated, or a shift kind has
            negative bounds or a minimum above its maximum.
    """
    normalized: Dict[str, DayPolicy] = {}
    for raw_day, policy in day_policies.items():
        day = normalize_day_name(raw_day)
        if day in normalized:
            raise ValueError(f"Day '{day}' is configured more than once.")
        normalized[day] = policy

    missing = [day for day in DAY_NAMES if day not in normalized]
    if missing:
        raise ValueError(f"Day policies missing for: {', '.join(missing)}")

    for day in DAY_NAMES:
        policy = normalized[day]
        if len(set(policy.enabled_kinds)) != len(policy.enabled_kinds):
            raise ValueError(f"{day}: a shift kind is enabled more than once.")
        for kind in policy.enabled_kinds:
            requirement = policy.requirement_for(kind)
            if requirement.minimum < 0 or requirement.maximum < 0:
                raise ValueError(
                    f"{day} {kind.value}: staffing bounds cannot be negative "
                    f"(minimum={requirement.minimum}, maximum={requirement.maximum})."
                )
            if requirement.minimum > requirement.maximum:
                raise ValueError(
                    f"{day} {kind.value}: minimum staff {requirement.minimum} exceeds maximum {requirement.maximum}."
                )
    return normalized


def validate_roster(staff_roster: Iterable[StaffMember]) -> List[StaffMember]:
    roster = list(staff_roster)
    seen = set()
    for member in roster:
        if member.id in seen:
            raise ValueError(f"Duplicate staff id detected: '{member.id}'")
        seen.add(member.id)
    return roster
