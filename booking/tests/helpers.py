# booking/tests/helpers.py
#
# Small builders shared by the booking/staff/reports test suites.
# 2030-01-07 is a Monday (day_of_week == 1).
#
from datetime import date, datetime
from zoneinfo import ZoneInfo

from django.contrib.auth import get_user_model

from booking.context import ActorContext
from booking.models import Organization, Service, Staff, StaffService
from staff.models import ScheduleOverride, WeeklySchedule

MONDAY = date(2030, 1, 7)
UTC = ZoneInfo("UTC")


def at(hhmm, on=MONDAY, tz=UTC):
    hours, minutes = map(int, hhmm.split(":"))
    return datetime(on.year, on.month, on.day, hours, minutes, tzinfo=tz)


def make_org(slug="fade-factory", name="Fade Factory", tz=""):
    return Organization.objects.create(name=name, slug=slug, timezone=tz)


def make_staff(organization, name="Ali", role=Staff.ROLE_MEMBER, username=None):
    user = None
    if username:
        user = get_user_model().objects.create_user(username=username, password="pass1234")
    return Staff.objects.create(organization=organization, name=name, role=role, user=user)


def make_service(organization, name="Haircut", duration=60, price_cents=2500, active=True):
    return Service.objects.create(
        organization=organization,
        name=name,
        duration_minutes=duration,
        price_cents=price_cents,
        is_active=active,
    )


def offer(staff, service):
    StaffService.objects.create(staff=staff, service=service)


def work(staff, start="09:00", end="17:00", day=1):
    return WeeklySchedule.objects.create(staff=staff, day_of_week=day, start_time=start, end_time=end)


def override(staff, kind, on=MONDAY, start=None, end=None):
    return ScheduleOverride.objects.create(staff=staff, type=kind, date=on, start_time=start, end_time=end)


def actor(staff):
    return ActorContext(organization_id=staff.organization_id, staff_id=staff.id, role=staff.role)
