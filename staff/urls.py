# staff/urls.py  (mounted under /api/staff/)
from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import ScheduleOverrideViewSet, StaffListView, StaffServicesView, WeeklyScheduleView

router = SimpleRouter()
router.register(r"overrides", ScheduleOverrideViewSet, basename="staff-override")

urlpatterns = [
    path("", StaffListView.as_view(), name="staff-list"),
    path("schedule/", WeeklyScheduleView.as_view(), name="staff-schedule"),
    path("<int:staff_id>/services/", StaffServicesView.as_view(), name="staff-services"),
    path("", include(router.urls)),
]
