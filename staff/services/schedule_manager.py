# staff/services/schedule_manager.py
#
# Purpose:
# - Weekly schedule editing (wholesale replace) and schedule overrides.
#
# Rules:
# - Times are "HH:MM"; start must be before end.
# - day_of_week is 0 (Sunday) .. 6 (Saturday).
# - day_off overrides carry no times; time_off / extra_work need both.
# - A member edits their own schedule; owners/admins can edit anyone in their shop.
#
import logging

from django.db import transaction

from booking.exceptions import FormatError, NotAuthorized, NotFound, ValidationFailed
from booking.models import Staff
from booking.services.slot_utils import parse_time, validate_day_of_week

from ..models import ScheduleOverride, WeeklySchedule

logger = logging.getLogger(__name__)

OVERRIDE_TYPES = {value for value, _label in ScheduleOverride.TYPE_CHOICES}


def validate_window(start_time, end_time):
    """Both "HH:MM" and start < end."""
    if parse_time(start_time) >= parse_time(end_time):
        raise FormatError(f"Start time {start_time} must be before end time {end_time}.")


def _check_staff(ctx, staff_id):
    staff_id = staff_id or ctx.staff_id
    if staff_id is None:
        raise NotAuthorized("Not a staff member.")
    if not Staff.objects.filter(pk=staff_id, organization_id=ctx.organization_id).exists():
        raise NotFound("Staff member not found.")
    if not ctx.can_manage_staff(staff_id):
        raise NotAuthorized("You can only manage your own schedule.")
    return staff_id


# ============ Weekly schedule ============

def get_weekly_schedule(ctx, staff_id=None):
    staff_id = _check_staff(ctx, staff_id)
    return list(WeeklySchedule.objects.filter(staff_id=staff_id).order_by("day_of_week", "start_time"))


def set_weekly_schedule(ctx, rows, staff_id=None):
    """
    Replace the staff member's whole weekly schedule.

    Args:
        rows: iterable of {"day_of_week": int, "start_time": "HH:MM", "end_time": "HH:MM"}

    Every row is validated before anything is deleted, so a bad row leaves the
    previous schedule untouched.
    """
    staff_id = _check_staff(ctx, staff_id)

    cleaned = []
    for row in rows:
        try:
            day = row["day_of_week"]
            start, end = row["start_time"], row["end_time"]
        except (KeyError, TypeError):
            raise ValidationFailed("Each schedule row needs day_of_week, start_time and end_time.")
        validate_day_of_week(day)
        validate_window(start, end)
        cleaned.append(WeeklySchedule(staff_id=staff_id, day_of_week=day, start_time=start, end_time=end))

    with transaction.atomic():
        WeeklySchedule.objects.filter(staff_id=staff_id).delete()
        WeeklySchedule.objects.bulk_create(cleaned)

    logger.info("Weekly schedule for staff %s replaced with %d rows", staff_id, len(cleaned))
    return get_weekly_schedule(ctx, staff_id)


# ============ Overrides ============

def list_overrides(ctx, start_date, end_date, staff_id=None):
    staff_id = _check_staff(ctx, staff_id)
    return list(
        ScheduleOverride.objects.filter(staff_id=staff_id, date__gte=start_date, date__lte=end_date)
        .order_by("date", "start_time")
    )


def create_override(ctx, override_type, date, start_time=None, end_time=None, reason="", staff_id=None):
    staff_id = _check_staff(ctx, staff_id)

    if override_type not in OVERRIDE_TYPES:
        raise ValidationFailed(f"Unknown override type {override_type!r}.")

    if override_type == ScheduleOverride.TYPE_DAY_OFF:
        start_time = end_time = None
    else:
        if not start_time or not end_time:
            raise ValidationFailed("Start and end times are required for this override.")
        validate_window(start_time, end_time)

    override = ScheduleOverride.objects.create(
        staff_id=staff_id,
        type=override_type,
        date=date,
        start_time=start_time,
        end_time=end_time,
        reason=reason or "",
    )
    logger.info("Override %s (%s) created for staff %s on %s", override.id, override_type, staff_id, date)
    return override


def delete_override(ctx, override_id):
    override = (
        ScheduleOverride.objects.select_related("staff")
        .filter(pk=override_id, staff__organization_id=ctx.organization_id)
        .first()
    )
    if override is None or not ctx.can_manage_staff(override.staff_id):
        raise NotAuthorized("Override not found or not authorized.")
    override.delete()
    return True
