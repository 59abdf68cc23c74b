"""Console output helpers for generated schedules."""

from __future__ import annotations

from itertools import groupby
from typing import Sequence

from shift_scheduler.domain.models import GlobalPolicy, Schedule, StaffMember
from shift_scheduler.reporting.stats import coverage_by_kind, staff_workload_frame


def print_schedule(schedule: Schedule, staff: Sequence[StaffMember]) -> None:
    """
    Display the schedule day by day, one line per shift.
    """
    names = {member.id: member.name for member in staff}

    print("\n" + "=" * 100)
    print(f"SCHEDULE {schedule.id} ({schedule.period_kind.value}, from {schedule.period_start.isoformat()})")
    print("=" * 100)

    ordered = sorted(schedule.shifts, key=lambda shift: (shift.date, shift.kind.start_hour))
    for date, day_shifts in groupby(ordered, key=lambda shift: shift.date):
        day_shifts = list(day_shifts)
        print(f"\n{'─' * 100}")
        print(f"{day_shifts[0].day.upper()} {date.isoformat()}")
        print(f"{'─' * 100}")
        print(f"{'Shift':<12}{'Time':<15}{'Staff (min/max)':<18}{'Assigned'}")

        for shift in day_shifts:
            assigned = ", ".join(names.get(staff_id, staff_id) for staff_id in shift.assigned_staff)
            if shift.is_understaffed:
                assigned = f"{assigned or '-'}  ⚠ UNDERSTAFFED"
            count = f"{len(shift.assigned_staff)} ({shift.minimum_staff}/{shift.maximum_staff})"
            time_range = f"{shift.start_time}-{shift.end_time}"
            print(f"{shift.kind.value:<12}{time_range:<15}{count:<18}{assigned or '-'}")


def print_report(schedule: Schedule, staff: Sequence[StaffMember], policy: GlobalPolicy) -> None:
    report = schedule.report
    names = {member.id: member.name for member in staff}

    print(f"\n{'=' * 100}")
    print("STAFF SUMMARY")
    print(f"{'=' * 100}\n")

    print(f"{'Staff':<20}{'Shifts':<8}{'Hours (Desired/Cap)':<28}{'Status'}")
    print("─" * 100)

    frame = staff_workload_frame(schedule, staff, policy)
    for row in frame.itertuples(index=False):
        if not row.active:
            status = "inactive"
        elif row.over_cap:
            status = "↑ Over cap"
        elif row.under_minimum:
            status = "↓ Under minimum"
        else:
            status = "✓"
        hours_str = f"{row.hours:.1f} ({row.desired_hours:.1f}/{row.hour_cap:.1f})"
        print(f"{row.name:<20}{row.shifts:<8}{hours_str:<28}{status}")

    print(f"\n{'=' * 100}")
    print("COVERAGE")
    print(f"{'=' * 100}\n")
    for row in coverage_by_kind(schedule).itertuples(index=False):
        print(f"{row.kind:<12}{row.shifts} shifts, {row.assigned} assignments, {row.understaffed} understaffed")

    print(f"\nTotal assignments: {report.total_assignments}")
    if report.emergency_assignments:
        print(f"\nEmergency assignments ({len(report.emergency_assignments)}):")
        for shift_id, staff_id in report.emergency_assignments:
            print(f"  - {names.get(staff_id, staff_id)} -> {shift_id}")
    if report.skill_mismatches:
        print(f"\nSkill mismatches ({len(report.skill_mismatches)}):")
        for shift_id, staff_id in report.skill_mismatches:
            print(f"  - {names.get(staff_id, staff_id)} lacks the required skills for {shift_id}")
    if report.understaffed_shift_ids:
        print(f"\nWARNING: {report.understaffed_count} shift(s) below minimum staffing:")
        for shift_id in report.understaffed_shift_ids:
            print(f"  - {shift_id}")
    else:
        print("\nAll shifts meet minimum staffing.")
