# booking/tests/test_availability_engine.py
#
# Slot computation runs against an in-memory store here; the ORM-backed store
# is covered by the booking manager and API tests.

from datetime import date, datetime
from zoneinfo import ZoneInfo

from django.test import SimpleTestCase

from booking.context import ANY_AVAILABLE, SpecificStaff
from booking.services.availability_engine import AvailabilityEngine, TimeSlot, compute_staff_slots
from booking.services.store import BookingRow, OverrideRow, ScheduleRow, ServiceInfo

MONDAY = date(2030, 1, 7)
UTC = ZoneInfo("UTC")


def at(hhmm):
    hours, minutes = map(int, hhmm.split(":"))
    return datetime(MONDAY.year, MONDAY.month, MONDAY.day, hours, minutes, tzinfo=UTC)


class FakeStore:
    """Just enough of BookingStore for the availability engine."""

    def __init__(self, services=(), offers=None, schedules=(), overrides=(), bookings=(), tz_name=None):
        self.services = {s.id: s for s in services}
        self.offers = offers or {}
        self.schedules = list(schedules)
        self.overrides = list(overrides)
        self.bookings = list(bookings)
        self.tz_name = tz_name
        self.calls = []

    def get_service(self, service_id):
        return self.services.get(service_id)

    def list_staff_offering_service(self, organization_id, service_id):
        return sorted(self.offers.get(service_id, []))

    def get_timezone_name(self, organization_id):
        return self.tz_name

    def staff_in_organization(self, organization_id, staff_id):
        return any(staff_id in ids for ids in self.offers.values())

    def list_weekly_schedule(self, staff_ids, day_of_week):
        self.calls.append("schedules")
        return [s for s in self.schedules if s.staff_id in staff_ids]

    def list_overrides(self, staff_ids, target_date):
        self.calls.append("overrides")
        return [o for o in self.overrides if o.staff_id in staff_ids]

    def list_active_bookings(self, staff_ids, range_start, range_end):
        self.calls.append("bookings")
        return [b for b in self.bookings if b.staff_id in staff_ids]


HAIRCUT = ServiceInfo(id=10, organization_id=1, name="Haircut", duration_minutes=60, price_cents=2500, is_active=True)
RETIRED = ServiceInfo(id=11, organization_id=1, name="Perm", duration_minutes=60, price_cents=4000, is_active=False)
FOREIGN = ServiceInfo(id=12, organization_id=2, name="Shave", duration_minutes=30, price_cents=1500, is_active=True)


class ComputeStaffSlotsTests(SimpleTestCase):
    def setUp(self):
        self.day = [ScheduleRow(staff_id=1, start_time="09:00", end_time="17:00")]

    def slots(self, overrides=(), bookings=(), duration=60, schedules=None):
        return compute_staff_slots(
            self.day if schedules is None else schedules,
            list(overrides),
            list(bookings),
            MONDAY,
            duration,
            UTC,
        )

    def test_end_to_end_example(self):
        # 09:00-17:00, 60 minutes -> 8 slots
        self.assertEqual(
            self.slots(),
            ["09:00", "10:00", "11:00", "12:00", "13:00", "14:00", "15:00", "16:00"],
        )
        # + time off 12:00-13:00 -> 7 slots
        lunch = OverrideRow(staff_id=1, type="time_off", start_time="12:00", end_time="13:00")
        self.assertEqual(len(self.slots([lunch])), 7)
        self.assertNotIn("12:00", self.slots([lunch]))
        # + booking 10:00-11:00 -> 6 slots
        booked = BookingRow(staff_id=1, start_time=at("10:00"), end_time=at("11:00"))
        result = self.slots([lunch], [booked])
        self.assertEqual(result, ["09:00", "11:00", "13:00", "14:00", "15:00", "16:00"])

    def test_no_schedule_means_no_slots(self):
        self.assertEqual(self.slots(schedules=[]), [])

    def test_day_off_wins_over_extra_work(self):
        overrides = [
            OverrideRow(staff_id=1, type="day_off"),
            OverrideRow(staff_id=1, type="extra_work", start_time="17:00", end_time="19:00"),
        ]
        self.assertEqual(self.slots(overrides), [])

    def test_extra_work_merges_seamlessly(self):
        # 09:00-17:00 + extra 16:00-19:00 -> one 09:00-19:00 window, 10 slots
        extra = OverrideRow(staff_id=1, type="extra_work", start_time="16:00", end_time="19:00")
        result = self.slots([extra])
        self.assertEqual(len(result), 10)
        self.assertEqual(result[-1], "18:00")

    def test_extra_work_on_a_day_without_schedule(self):
        extra = OverrideRow(staff_id=1, type="extra_work", start_time="10:00", end_time="12:00")
        self.assertEqual(self.slots([extra], schedules=[]), ["10:00", "11:00"])

    def test_back_to_back_booking_does_not_block_neighbours(self):
        booked = BookingRow(staff_id=1, start_time=at("10:00"), end_time=at("11:00"))
        result = self.slots(bookings=[booked])
        self.assertIn("09:00", result)
        self.assertIn("11:00", result)
        self.assertNotIn("10:00", result)

    def test_partial_overlap_blocks_slot(self):
        # 10:30-11:30 overlaps both the 10:00 and the 11:00 slot
        booked = BookingRow(staff_id=1, start_time=at("10:30"), end_time=at("11:30"))
        result = self.slots(bookings=[booked])
        self.assertNotIn("10:00", result)
        self.assertNotIn("11:00", result)
        self.assertEqual(len(result), 6)

    def test_split_shift(self):
        schedules = [
            ScheduleRow(staff_id=1, start_time="09:00", end_time="12:00"),
            ScheduleRow(staff_id=1, start_time="14:00", end_time="16:00"),
        ]
        self.assertEqual(
            self.slots(schedules=schedules),
            ["09:00", "10:00", "11:00", "14:00", "15:00"],
        )

    def test_shop_timezone_is_used_for_bookings(self):
        # 10:00 in Istanbul is 07:00 UTC
        istanbul = ZoneInfo("Europe/Istanbul")
        booked = BookingRow(
            staff_id=1,
            start_time=datetime(2030, 1, 7, 7, 0, tzinfo=UTC),
            end_time=datetime(2030, 1, 7, 8, 0, tzinfo=UTC),
        )
        result = compute_staff_slots(self.day, [], [booked], MONDAY, 60, istanbul)
        self.assertNotIn("10:00", result)
        self.assertIn("09:00", result)


class AvailabilityEngineTests(SimpleTestCase):
    def make_engine(self, **kwargs):
        store = FakeStore(services=[HAIRCUT, RETIRED, FOREIGN], offers={10: [1, 2], 11: [1]}, **kwargs)
        return AvailabilityEngine(store), store

    def test_specific_staff_slots_carry_staff_id(self):
        engine, _ = self.make_engine(schedules=[ScheduleRow(1, "09:00", "11:00")])
        slots = engine.get_available_slots(1, 10, SpecificStaff(1), MONDAY)
        self.assertEqual(slots, [TimeSlot("09:00", 1), TimeSlot("10:00", 1)])

    def test_any_available_is_a_distinct_union_without_staff(self):
        engine, _ = self.make_engine(
            schedules=[ScheduleRow(1, "09:00", "11:00"), ScheduleRow(2, "10:00", "12:00")],
        )
        slots = engine.get_available_slots(1, 10, ANY_AVAILABLE, MONDAY)
        self.assertEqual([s.time for s in slots], ["09:00", "10:00", "11:00"])
        self.assertTrue(all(s.staff_id is None for s in slots))

    def test_inputs_are_loaded_once_for_all_staff(self):
        engine, store = self.make_engine(
            schedules=[ScheduleRow(1, "09:00", "11:00"), ScheduleRow(2, "10:00", "12:00")],
        )
        engine.get_available_slots(1, 10, ANY_AVAILABLE, MONDAY)
        self.assertEqual(sorted(store.calls), ["bookings", "overrides", "schedules"])

    def test_unknown_inactive_or_foreign_service_has_no_slots(self):
        engine, _ = self.make_engine(schedules=[ScheduleRow(1, "09:00", "17:00")])
        self.assertEqual(engine.get_available_slots(1, 999, ANY_AVAILABLE, MONDAY), [])
        self.assertEqual(engine.get_available_slots(1, 11, ANY_AVAILABLE, MONDAY), [])
        self.assertEqual(engine.get_available_slots(1, 12, ANY_AVAILABLE, MONDAY), [])

    def test_staff_outside_organization_has_no_slots(self):
        engine, _ = self.make_engine(schedules=[ScheduleRow(1, "09:00", "17:00")])
        self.assertEqual(engine.get_available_slots(1, 10, SpecificStaff(77), MONDAY), [])

    def test_find_free_staff_prefers_lowest_id(self):
        engine, _ = self.make_engine(
            schedules=[ScheduleRow(1, "09:00", "12:00"), ScheduleRow(2, "09:00", "12:00")],
        )
        self.assertEqual(engine.find_free_staff(1, HAIRCUT, MONDAY, "10:00"), 1)

    def test_find_free_staff_skips_busy_barber(self):
        engine, _ = self.make_engine(
            schedules=[ScheduleRow(1, "09:00", "12:00"), ScheduleRow(2, "09:00", "12:00")],
            bookings=[BookingRow(1, at("10:00"), at("11:00"))],
        )
        self.assertEqual(engine.find_free_staff(1, HAIRCUT, MONDAY, "10:00"), 2)

    def test_find_free_staff_none_when_everyone_is_busy(self):
        engine, _ = self.make_engine(
            schedules=[ScheduleRow(1, "09:00", "12:00")],
            bookings=[BookingRow(1, at("10:00"), at("11:00"))],
        )
        self.assertIsNone(engine.find_free_staff(1, HAIRCUT, MONDAY, "10:00"))

    def test_off_grid_time_is_not_available(self):
        engine, _ = self.make_engine(schedules=[ScheduleRow(1, "09:00", "12:00")])
        self.assertFalse(engine.is_slot_available_for_staff(1, 1, HAIRCUT, MONDAY, "09:30"))
        self.assertTrue(engine.is_slot_available_for_staff(1, 1, HAIRCUT, MONDAY, "10:00"))

    def test_unknown_staff_choice_is_a_type_error(self):
        engine, _ = self.make_engine()
        with self.assertRaises(TypeError):
            engine.get_available_slots(1, 10, "anyone", MONDAY)
