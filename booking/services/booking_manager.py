"""
booking_manager.py
------------------
Coordinates booking creation, status changes and cancellation.

Public booking flow (request -> validate -> guarded insert -> pending | rejected):
1. Banned phone?                       -> CustomerBanned
2. Service missing/inactive/foreign?   -> ServiceNotFound
3. "Any available": first barber (lowest id) whose open slots include the
   requested time                      -> otherwise NoStaffAvailable
   Specific barber: the time must still be one of their open slots
                                       -> otherwise SlotNoLongerAvailable
4. BookingStore.insert_booking() locks the barber, re-checks overlap and inserts;
   the database exclusion constraint (PostgreSQL) is the final authority
                                       -> SlotNoLongerAvailable on conflict

Steps 1-3 are a friendly pre-check only. Two customers can both pass them for the
same slot; step 4 guarantees only one of them gets it.
"""

import logging
from datetime import datetime, timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from ..context import AnyAvailable, SpecificStaff
from ..exceptions import (
    BookingNotFound,
    CustomerBanned,
    FormatError,
    NoStaffAvailable,
    NotAuthorized,
    ServiceNotFound,
    SlotNoLongerAvailable,
    ValidationFailed,
)
from ..models import Booking, Staff
from .availability_engine import AvailabilityEngine
from .customer_bans import normalize_phone
from .slot_utils import date_to_range, get_zone
from .store import BookingStore

logger = logging.getLogger(__name__)


def booking_setting(name, default):
    return getattr(settings, "BOOKING", {}).get(name, default)


class BookingManager:
    def __init__(self, store=None, availability=None):
        self.store = store or BookingStore()
        self.availability = availability or AvailabilityEngine(self.store)

    # ---------------------------------------------------------------
    # helpers
    # ---------------------------------------------------------------
    def _local_slot(self, organization_id, start_time):
        """
        (aware start, local date, "HH:MM") in the shop's timezone.
        A naive start_time is shop-local wall-clock time, like the listed slots.
        """
        if start_time.second or start_time.microsecond:
            raise FormatError("Start time must be on a whole minute.")
        tz = get_zone(self.store.get_timezone_name(organization_id))
        if timezone.is_naive(start_time):
            start_time = timezone.make_aware(start_time, tz)
        local = timezone.localtime(start_time, tz)
        return start_time, local.date(), local.strftime("%H:%M")

    @staticmethod
    def _validate_customer(customer_name, customer_phone):
        if not (customer_name or "").strip():
            raise ValidationFailed("Customer name is required.")
        if not normalize_phone(customer_phone):
            raise ValidationFailed("A valid phone number is required.")

    def _insert(self, organization_id, service, staff_id, start_time, customer_name, customer_phone, notes, status):
        return self.store.insert_booking(
            organization_id=organization_id,
            service_id=service.id,
            staff_id=staff_id,
            start_time=start_time,
            end_time=start_time + timedelta(minutes=service.duration_minutes),
            customer_name=customer_name.strip(),
            customer_phone=customer_phone.strip(),
            notes=notes or "",
            price_at_booking=service.price_cents,
            status=status,
        )

    # ---------------------------------------------------------------
    # public flow
    # ---------------------------------------------------------------
    def create_public_booking(
        self,
        organization_id,
        service_id,
        staff_choice,
        start_time,
        customer_name,
        customer_phone,
        notes="",
    ) -> Booking:
        """
        Create a pending booking from the public booking page.

        Raises:
            CustomerBanned, ServiceNotFound, NoStaffAvailable, SlotNoLongerAvailable,
            ValidationFailed, FormatError
        """
        self._validate_customer(customer_name, customer_phone)

        if self.store.is_phone_banned(organization_id, normalize_phone(customer_phone), timezone.now()):
            logger.info("Rejected booking for banned phone in organization %s", organization_id)
            raise CustomerBanned()

        service = self.availability.bookable_service(organization_id, service_id)
        if service is None:
            raise ServiceNotFound()

        start_time, target_date, time_str = self._local_slot(organization_id, start_time)

        if isinstance(staff_choice, AnyAvailable):
            staff_id = self.availability.find_free_staff(organization_id, service, target_date, time_str)
            if staff_id is None:
                logger.info("No staff free for service %s at %s %s", service.id, target_date, time_str)
                raise NoStaffAvailable()
        elif isinstance(staff_choice, SpecificStaff):
            staff_id = staff_choice.staff_id
            if not self.store.staff_in_organization(organization_id, staff_id):
                raise ValidationFailed("Staff member not found.")
            if not self.availability.is_slot_available_for_staff(
                organization_id, staff_id, service, target_date, time_str
            ):
                logger.info("Slot %s %s no longer open for staff %s", target_date, time_str, staff_id)
                raise SlotNoLongerAvailable()
        else:
            raise TypeError(f"Unsupported staff choice: {staff_choice!r}")

        booking = self._insert(
            organization_id,
            service,
            staff_id,
            start_time,
            customer_name,
            customer_phone,
            notes,
            booking_setting("PUBLIC_BOOKING_STATUS", Booking.STATUS_PENDING),
        )
        logger.info("Booking %s created for staff %s at %s", booking.id, staff_id, start_time)
        return booking

    # ---------------------------------------------------------------
    # dashboard flow
    # ---------------------------------------------------------------
    def create_dashboard_booking(
        self, ctx, service_id, staff_id, start_time, customer_name, customer_phone, notes=""
    ) -> Booking:
        """
        Owners/admins book on behalf of a walk-in or phone customer.
        Only overlap with other bookings is checked; working hours are not enforced.
        """
        ctx.require_manager()
        self._validate_customer(customer_name, customer_phone)

        service = self.store.get_service(service_id)
        if service is None or service.organization_id != ctx.organization_id:
            raise ServiceNotFound()
        if not self.store.staff_in_organization(ctx.organization_id, staff_id):
            raise ValidationFailed("Staff member not found.")

        start_time, _date, _time = self._local_slot(ctx.organization_id, start_time)
        try:
            booking = self._insert(
                ctx.organization_id,
                service,
                staff_id,
                start_time,
                customer_name,
                customer_phone,
                notes,
                booking_setting("DASHBOARD_BOOKING_STATUS", Booking.STATUS_CONFIRMED),
            )
        except SlotNoLongerAvailable:
            raise SlotNoLongerAvailable("This time slot conflicts with an existing appointment.")
        logger.info("Dashboard booking %s created by staff %s", booking.id, ctx.staff_id)
        return booking

    def list_bookings(self, ctx, status=None, start=None, end=None, staff_id=None):
        """
        start/end may be aware datetimes or local dates; a date range is
        inclusive of both days in the shop's timezone.
        """
        qs = Booking.objects.filter(organization_id=ctx.organization_id).select_related("service", "staff")

        tz = get_zone(self.store.get_timezone_name(ctx.organization_id))
        if start is not None and not isinstance(start, datetime):
            start = date_to_range(start, tz)[0]
        if end is not None and not isinstance(end, datetime):
            end = date_to_range(end, tz)[1]

        # Members only ever see their own appointments
        if not ctx.is_manager:
            qs = qs.filter(staff_id=ctx.staff_id)
        elif staff_id:
            qs = qs.filter(staff_id=staff_id)

        if status:
            statuses = [status] if isinstance(status, str) else list(status)
            qs = qs.filter(status__in=statuses)
        if start:
            qs = qs.filter(start_time__gte=start)
        if end:
            qs = qs.filter(end_time__lte=end)
        return qs.order_by("start_time")

    def get_booking(self, ctx, booking_id) -> Booking:
        booking = (
            Booking.objects.select_related("service", "staff")
            .filter(pk=booking_id, organization_id=ctx.organization_id)
            .first()
        )
        if booking is None:
            raise BookingNotFound()
        if not ctx.can_manage_staff(booking.staff_id):
            raise NotAuthorized("Not authorized to access this booking.")
        return booking

    @transaction.atomic
    def update_status(self, ctx, booking_id, status) -> Booking:
        valid = {value for value, _label in Booking.STATUS_CHOICES}
        if status not in valid:
            raise ValidationFailed(f"Unknown status {status!r}.")

        booking = self.get_booking(ctx, booking_id)
        reactivating = status in Booking.ACTIVE_STATUSES and not booking.is_active
        if reactivating:
            Staff.objects.select_for_update().filter(pk=booking.staff_id).first()
            if self.store.has_overlapping_booking(
                booking.staff_id, booking.start_time, booking.end_time, exclude_id=booking.id
            ):
                raise SlotNoLongerAvailable("This time slot conflicts with an existing appointment.")

        booking.status = status
        booking.save(update_fields=["status", "updated_at"])
        logger.info("Booking %s set to %s by staff %s", booking.id, status, ctx.staff_id)
        return booking

    @transaction.atomic
    def cancel_booking(self, ctx, booking_id, reason="") -> Booking:
        """
        Cancel a booking; the reason (if any) is appended to the notes.
        A cancelled booking no longer blocks its slot.
        """
        booking = self.get_booking(ctx, booking_id)
        if reason:
            booking.notes = f"{booking.notes or ''}\n[Cancelled: {reason}]".strip()
        booking.status = Booking.STATUS_CANCELLED
        booking.save(update_fields=["status", "notes", "updated_at"])
        logger.info("Booking %s cancelled by staff %s", booking.id, ctx.staff_id)
        return booking

    def booking_stats(self, ctx) -> dict:
        """Upcoming pending/confirmed counts and today's active appointments."""
        tz = get_zone(self.store.get_timezone_name(ctx.organization_id))
        today = timezone.localtime(timezone.now(), tz).date()
        day_start, day_end = date_to_range(today, tz)

        qs = Booking.objects.filter(organization_id=ctx.organization_id, start_time__gte=day_start)
        if not ctx.is_manager:
            qs = qs.filter(staff_id=ctx.staff_id)

        return {
            "pending": qs.filter(status=Booking.STATUS_PENDING).count(),
            "confirmed": qs.filter(status=Booking.STATUS_CONFIRMED).count(),
            "today": qs.filter(start_time__lt=day_end, status__in=Booking.ACTIVE_STATUSES).count(),
        }
