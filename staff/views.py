# staff/views.py
#
# Purpose:
# - Dashboard APIs for a shop's staff: member list, weekly schedules,
#   schedule overrides and the services each member offers.
#
# Permissions:
# - Login + staff membership (ActorContext). Members manage their own schedule;
#   owners/admins may pass ?staff=ID (or "staff" in the body) to act on others.
#
from datetime import timedelta

from django.utils import timezone
from rest_framework import status, viewsets
from rest_framework.response import Response
from rest_framework.views import APIView

from booking.context import ActorContextMixin, optional_int
from booking.exceptions import NotFound
from booking.models import Staff
from booking.serializers import StaffSerializer
from booking.services.catalog import assign_services, get_staff_services
from booking.services.slot_utils import parse_date

from .serializers import (
    ScheduleOverrideInputSerializer,
    ScheduleOverrideSerializer,
    StaffServicesSerializer,
    WeeklyScheduleInputSerializer,
    WeeklyScheduleSerializer,
)
from .services import schedule_manager

# Default window for GET /api/staff/overrides/ when no range is given
DEFAULT_OVERRIDE_WINDOW_DAYS = 30


class StaffListView(ActorContextMixin, APIView):
    """GET /api/staff/  members of the caller's organization."""

    def get(self, request):
        ctx = self.get_actor()
        staff = Staff.objects.filter(organization_id=ctx.organization_id).order_by("id")
        return Response(StaffSerializer(staff, many=True).data)


class WeeklyScheduleView(ActorContextMixin, APIView):
    """
    GET /api/staff/schedule/[?staff=ID]
    PUT /api/staff/schedule/[?staff=ID]   replaces the whole weekly schedule
    """

    def get(self, request):
        ctx = self.get_actor()
        staff_id = optional_int(request.query_params.get("staff"), "staff")
        rows = schedule_manager.get_weekly_schedule(ctx, staff_id)
        return Response(WeeklyScheduleSerializer(rows, many=True).data)

    def put(self, request):
        ctx = self.get_actor()
        staff_id = optional_int(request.query_params.get("staff"), "staff")
        serializer = WeeklyScheduleInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        rows = schedule_manager.set_weekly_schedule(ctx, serializer.validated_data["schedule"], staff_id)
        return Response(WeeklyScheduleSerializer(rows, many=True).data)


class ScheduleOverrideViewSet(ActorContextMixin, viewsets.ViewSet):
    """
    GET    /api/staff/overrides/?start=YYYY-MM-DD&end=YYYY-MM-DD[&staff=ID]
    POST   /api/staff/overrides/
    DELETE /api/staff/overrides/{id}/
    """
    lookup_value_regex = r"\d+"

    def list(self, request):
        ctx = self.get_actor()
        params = request.query_params
        start = parse_date(params["start"]) if params.get("start") else timezone.localdate()
        end = parse_date(params["end"]) if params.get("end") else start + timedelta(days=DEFAULT_OVERRIDE_WINDOW_DAYS)
        staff_id = optional_int(params.get("staff"), "staff")
        overrides = schedule_manager.list_overrides(ctx, start, end, staff_id)
        return Response(ScheduleOverrideSerializer(overrides, many=True).data)

    def create(self, request):
        ctx = self.get_actor()
        serializer = ScheduleOverrideInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        override = schedule_manager.create_override(
            ctx,
            data["type"],
            data["date"],
            start_time=data.get("start_time") or None,
            end_time=data.get("end_time") or None,
            reason=data.get("reason", ""),
            staff_id=data.get("staff"),
        )
        return Response(ScheduleOverrideSerializer(override).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        schedule_manager.delete_override(self.get_actor(), pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class StaffServicesView(ActorContextMixin, APIView):
    """
    GET /api/staff/{id}/services/
    PUT /api/staff/{id}/services/   {"service_ids": [1, 2]}  (owner/admin)
    """

    def get(self, request, staff_id):
        ctx = self.get_actor()
        if not Staff.objects.filter(pk=staff_id, organization_id=ctx.organization_id).exists():
            raise NotFound("Member not found in your organization.")
        return Response({"service_ids": get_staff_services(staff_id)})

    def put(self, request, staff_id):
        ctx = self.get_actor()
        serializer = StaffServicesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        service_ids = assign_services(ctx, staff_id, serializer.validated_data["service_ids"])
        return Response({"service_ids": service_ids})
