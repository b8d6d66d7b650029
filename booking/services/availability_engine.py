"""
availability_engine.py
----------------------
Computes open appointment slots for a service on a date.

Per staff member:
1) a day_off override on the date empties the day (even if extra_work exists),
2) weekly schedule windows + extra_work overrides are merged into disjoint intervals,
3) candidate slots step through each interval by the service duration,
4) candidates overlapping a time_off override or an active booking are dropped.

Overlap is half-open on both sides: [start, end) vs [other_start, other_end)
conflict when start < other_end and end > other_start, so back-to-back
appointments never collide.

The engine reads through a BookingStore (booking/services/store.py) and loads
schedules, overrides and bookings for all candidate staff in one batch.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from staff.models import ScheduleOverride

from ..context import AnyAvailable, SpecificStaff
from .slot_utils import (
    date_to_range,
    day_of_week,
    format_time,
    generate_slots,
    get_zone,
    merge_intervals,
    minute_to_datetime,
    parse_time,
)
from .store import BookingStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeSlot:
    time: str
    staff_id: Optional[int]

    def as_dict(self):
        return {"time": self.time, "staff_id": self.staff_id}


def _bounded(override):
    return bool(override.start_time and override.end_time)


def compute_staff_slots(schedules, overrides, bookings, target_date, service_duration, tz=None) -> List[str]:
    """
    Pure slot computation for one staff member on one date.

    Args:
        schedules: rows with start_time/end_time ("HH:MM") for the date's weekday
        overrides: rows with type/start_time/end_time dated on target_date
        bookings: active bookings with aware start_time/end_time
        target_date: the local calendar date
        service_duration: minutes
        tz: timezone the schedule times are expressed in

    Returns:
        Sorted "HH:MM" strings.
    """
    if any(o.type == ScheduleOverride.TYPE_DAY_OFF for o in overrides):
        return []

    intervals = [(parse_time(s.start_time), parse_time(s.end_time)) for s in schedules]
    intervals.extend(
        (parse_time(o.start_time), parse_time(o.end_time))
        for o in overrides
        if o.type == ScheduleOverride.TYPE_EXTRA_WORK and _bounded(o)
    )
    candidates = generate_slots(merge_intervals(intervals), service_duration)

    time_offs = [
        (parse_time(o.start_time), parse_time(o.end_time))
        for o in overrides
        if o.type == ScheduleOverride.TYPE_TIME_OFF and _bounded(o)
    ]

    free = []
    for start in candidates:
        end = start + service_duration

        if any(start < off_end and end > off_start for off_start, off_end in time_offs):
            continue

        slot_start = minute_to_datetime(target_date, start, tz)
        slot_end = minute_to_datetime(target_date, end, tz)
        if any(slot_start < b.end_time and slot_end > b.start_time for b in bookings):
            continue

        free.append(format_time(start))
    return free


class AvailabilityEngine:
    def __init__(self, store=None):
        self.store = store or BookingStore()

    def _candidate_staff(self, organization_id, service_id, staff_choice) -> List[int]:
        if isinstance(staff_choice, SpecificStaff):
            if not self.store.staff_in_organization(organization_id, staff_choice.staff_id):
                return []
            return [staff_choice.staff_id]
        if isinstance(staff_choice, AnyAvailable):
            return self.store.list_staff_offering_service(organization_id, service_id)
        raise TypeError(f"Unsupported staff choice: {staff_choice!r}")

    def bookable_service(self, organization_id, service_id):
        service = self.store.get_service(service_id)
        if service is None or not service.is_active or service.organization_id != organization_id:
            return None
        return service

    def staff_slots(self, organization_id, staff_ids, target_date, service_duration) -> Dict[int, List[str]]:
        """
        Open slots per staff member, batch-loading every input row once.
        Keys keep the order of `staff_ids`.
        """
        if not staff_ids:
            return {}

        tz = get_zone(self.store.get_timezone_name(organization_id))
        day_start, day_end = date_to_range(target_date, tz)

        schedules = self.store.list_weekly_schedule(staff_ids, day_of_week(target_date))
        overrides = self.store.list_overrides(staff_ids, target_date)
        bookings = self.store.list_active_bookings(staff_ids, day_start, day_end)

        result = {}
        for staff_id in staff_ids:
            result[staff_id] = compute_staff_slots(
                [s for s in schedules if s.staff_id == staff_id],
                [o for o in overrides if o.staff_id == staff_id],
                [b for b in bookings if b.staff_id == staff_id],
                target_date,
                service_duration,
                tz,
            )
        return result

    def get_available_slots(self, organization_id, service_id, staff_choice, target_date) -> List[TimeSlot]:
        """
        Open slots for a service on a date.

        - SpecificStaff: that barber's slots, tagged with their id.
        - AnyAvailable: distinct times across every barber offering the service,
          with staff_id=None (the barber is assigned at booking time).

        An unknown, inactive or foreign service yields [] rather than an error.
        """
        service = self.bookable_service(organization_id, service_id)
        if service is None:
            logger.info("No availability: service %s not bookable in organization %s", service_id, organization_id)
            return []

        staff_ids = self._candidate_staff(organization_id, service.id, staff_choice)
        per_staff = self.staff_slots(organization_id, staff_ids, target_date, service.duration_minutes)

        if isinstance(staff_choice, SpecificStaff):
            slots = [TimeSlot(t, staff_choice.staff_id) for t in per_staff.get(staff_choice.staff_id, [])]
            return sorted(slots, key=lambda s: s.time)

        distinct = {t for times in per_staff.values() for t in times}
        return [TimeSlot(t, None) for t in sorted(distinct)]

    def find_free_staff(self, organization_id, service, target_date, time_str) -> Optional[int]:
        """
        First staff member (lowest id) offering `service` whose open slots on
        target_date include time_str.
        """
        staff_ids = self.store.list_staff_offering_service(organization_id, service.id)
        per_staff = self.staff_slots(organization_id, staff_ids, target_date, service.duration_minutes)
        for staff_id in staff_ids:
            if time_str in per_staff[staff_id]:
                return staff_id
        return None

    def is_slot_available_for_staff(self, organization_id, staff_id, service, target_date, time_str) -> bool:
        per_staff = self.staff_slots(organization_id, [staff_id], target_date, service.duration_minutes)
        return time_str in per_staff.get(staff_id, [])
