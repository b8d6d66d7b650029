"""
store.py
--------
Narrow data-access layer used by the availability engine and the booking guard.

The engine only ever talks to a BookingStore, never to the ORM directly, so the
pure slot computation can be exercised with an in-memory store and the queries
stay batched (one query per kind of row, whatever the number of staff members).

Double-booking protection lives in insert_booking():
- the staff row is locked with SELECT ... FOR UPDATE (one writer per barber),
- active bookings overlapping [start, end) are re-checked inside that lock,
- on PostgreSQL the "no_overlapping_bookings" exclusion constraint is the final
  word; its IntegrityError is translated into SlotNoLongerAvailable.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from django.db import IntegrityError, transaction

from staff.models import ScheduleOverride, WeeklySchedule

from ..exceptions import SlotNoLongerAvailable
from ..models import Booking, Organization, Service, Staff, StaffService
from .customer_bans import is_customer_banned

logger = logging.getLogger(__name__)

EXCLUSION_CONSTRAINT_NAME = "no_overlapping_bookings"


@dataclass(frozen=True)
class ServiceInfo:
    id: int
    organization_id: int
    name: str
    duration_minutes: int
    price_cents: int
    is_active: bool


@dataclass(frozen=True)
class ScheduleRow:
    staff_id: int
    start_time: str
    end_time: str


@dataclass(frozen=True)
class OverrideRow:
    staff_id: int
    type: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None


@dataclass(frozen=True)
class BookingRow:
    staff_id: int
    start_time: object
    end_time: object


def is_exclusion_violation(exc: IntegrityError) -> bool:
    cause = getattr(exc, "__cause__", None)
    diag = getattr(cause, "diag", None)
    if diag is not None and getattr(diag, "constraint_name", None) == EXCLUSION_CONSTRAINT_NAME:
        return True
    return EXCLUSION_CONSTRAINT_NAME in str(exc)


class BookingStore:
    """Django ORM implementation of the availability/booking data contracts."""

    def get_service(self, service_id) -> Optional[ServiceInfo]:
        row = (
            Service.objects.filter(pk=service_id)
            .values("id", "organization_id", "name", "duration_minutes", "price_cents", "is_active")
            .first()
        )
        return ServiceInfo(**row) if row else None

    def list_staff_offering_service(self, organization_id, service_id):
        return list(
            StaffService.objects.filter(
                service_id=service_id,
                staff__organization_id=organization_id,
            )
            .order_by("staff_id")
            .values_list("staff_id", flat=True)
        )

    def get_timezone_name(self, organization_id) -> Optional[str]:
        """Organization timezone, or None to fall back to settings.TIME_ZONE."""
        name = Organization.objects.filter(pk=organization_id).values_list("timezone", flat=True).first()
        return name or None

    def staff_in_organization(self, organization_id, staff_id) -> bool:
        return Staff.objects.filter(pk=staff_id, organization_id=organization_id).exists()

    def list_weekly_schedule(self, staff_ids, day_of_week):
        qs = WeeklySchedule.objects.filter(staff_id__in=staff_ids, day_of_week=day_of_week)
        return [
            ScheduleRow(staff_id=r.staff_id, start_time=r.start_time, end_time=r.end_time)
            for r in qs.order_by("staff_id", "start_time")
        ]

    def list_overrides(self, staff_ids, target_date):
        qs = ScheduleOverride.objects.filter(staff_id__in=staff_ids, date=target_date)
        return [
            OverrideRow(staff_id=o.staff_id, type=o.type, start_time=o.start_time, end_time=o.end_time)
            for o in qs
        ]

    def list_active_bookings(self, staff_ids, range_start, range_end):
        qs = Booking.objects.filter(
            staff_id__in=staff_ids,
            status__in=Booking.ACTIVE_STATUSES,
            start_time__lt=range_end,
            end_time__gt=range_start,
        )
        return [
            BookingRow(staff_id=b.staff_id, start_time=b.start_time, end_time=b.end_time)
            for b in qs.order_by("start_time")
        ]

    def has_overlapping_booking(self, staff_id, start_time, end_time, exclude_id=None) -> bool:
        qs = Booking.objects.filter(
            staff_id=staff_id,
            status__in=Booking.ACTIVE_STATUSES,
            start_time__lt=end_time,
            end_time__gt=start_time,
        )
        if exclude_id is not None:
            qs = qs.exclude(pk=exclude_id)
        return qs.exists()

    def insert_booking(self, **fields) -> Booking:
        """
        Atomically insert a booking, refusing any overlap for the same staff member.

        Raises:
            SlotNoLongerAvailable: another active booking already holds part of the range.
        """
        staff_id = fields["staff_id"]
        with transaction.atomic():
            # Serializes writers per staff member (no-op lock on SQLite, where
            # IMMEDIATE transactions already serialize writers).
            Staff.objects.select_for_update().filter(pk=staff_id).first()

            if self.has_overlapping_booking(staff_id, fields["start_time"], fields["end_time"]):
                logger.warning(
                    "Booking overlap for staff %s at %s detected before insert",
                    staff_id,
                    fields["start_time"],
                )
                raise SlotNoLongerAvailable()

            try:
                with transaction.atomic():
                    return Booking.objects.create(**fields)
            except IntegrityError as exc:
                if is_exclusion_violation(exc):
                    logger.warning(
                        "Exclusion constraint rejected booking for staff %s at %s",
                        staff_id,
                        fields["start_time"],
                    )
                    raise SlotNoLongerAvailable() from exc
                raise

    def is_phone_banned(self, organization_id, normalized_phone, as_of) -> bool:
        return is_customer_banned(organization_id, normalized_phone, as_of)["banned"]
