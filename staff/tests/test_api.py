# staff/tests/test_api.py

from django.test import TestCase
from rest_framework.test import APIClient

from booking.models import Staff
from booking.tests.helpers import make_org, make_service, make_staff


class StaffApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.org = make_org()
        self.owner = make_staff(self.org, "Owner", role=Staff.ROLE_OWNER, username="owner")
        self.ali = make_staff(self.org, "Ali", username="ali")
        self.cut = make_service(self.org, name="Cut")

    def test_staff_list(self):
        self.client.force_authenticate(user=self.ali.user)
        resp = self.client.get("/api/staff/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([s["name"] for s in resp.data], ["Owner", "Ali"])

    def test_schedule_roundtrip(self):
        self.client.force_authenticate(user=self.ali.user)
        body = {"schedule": [{"day_of_week": 1, "start_time": "09:00", "end_time": "17:00"}]}
        resp = self.client.put("/api/staff/schedule/", body, format="json")
        self.assertEqual(resp.status_code, 200)
        resp = self.client.get("/api/staff/schedule/")
        self.assertEqual(
            [(r["day_of_week"], r["start_time"], r["end_time"]) for r in resp.data],
            [(1, "09:00", "17:00")],
        )

    def test_bad_schedule_row(self):
        self.client.force_authenticate(user=self.ali.user)
        body = {"schedule": [{"day_of_week": 1, "start_time": "25:00", "end_time": "26:00"}]}
        resp = self.client.put("/api/staff/schedule/", body, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["code"], "invalid_format")

    def test_member_cannot_edit_others_schedule(self):
        self.client.force_authenticate(user=self.ali.user)
        resp = self.client.get("/api/staff/schedule/", {"staff": self.owner.id})
        self.assertEqual(resp.status_code, 403)

    def test_overrides(self):
        self.client.force_authenticate(user=self.ali.user)
        resp = self.client.post(
            "/api/staff/overrides/",
            {"type": "time_off", "date": "2030-01-07", "start_time": "12:00", "end_time": "13:00"},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        override_id = resp.data["id"]

        resp = self.client.get("/api/staff/overrides/", {"start": "2030-01-01", "end": "2030-01-31"})
        self.assertEqual([o["id"] for o in resp.data], [override_id])

        self.assertEqual(self.client.delete(f"/api/staff/overrides/{override_id}/").status_code, 204)

    def test_assign_services(self):
        self.client.force_authenticate(user=self.owner.user)
        resp = self.client.put(f"/api/staff/{self.ali.id}/services/", {"service_ids": [self.cut.id]}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["service_ids"], [self.cut.id])
        self.assertEqual(self.client.get(f"/api/staff/{self.ali.id}/services/").data["service_ids"], [self.cut.id])

        self.client.force_authenticate(user=self.ali.user)
        resp = self.client.put(f"/api/staff/{self.ali.id}/services/", {"service_ids": []}, format="json")
        self.assertEqual(resp.status_code, 403)
