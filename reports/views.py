# reports/views.py
#
# Purpose:
# - Dashboard summary for the caller's organization.
# - Members see figures for their own bookings only; owners/admins see the shop.
#
from datetime import timedelta

from django.db.models import Count
from django.db.models.functions import TruncDate
from django.utils import timezone
from rest_framework.response import Response
from rest_framework.views import APIView

from booking.context import ActorContextMixin
from booking.models import Booking
from booking.services.booking_manager import BookingManager
from booking.services.slot_utils import get_zone

# Look-back window for the per-day breakdowns
REPORT_WINDOW_DAYS = 30
TOP_SERVICES_LIMIT = 5


class ReportsView(ActorContextMixin, APIView):
    """
    GET /api/reports/summary

    Returns JSON with:
    - stats: {"pending": N, "confirmed": N, "today": N}  (upcoming / today)
    - bookings_per_day: [{ "day": "YYYY-MM-DD", "count": N }, ...]
    - cancellations_per_day: [{ "day": "YYYY-MM-DD", "count": N }, ...]
    - top_services: [{ "service_id": X, "service_name": "...", "count": N }, ...]

    Breakdowns cover the last 30 days and group by the shop's local date.
    """
    manager = BookingManager()

    def get(self, request):
        ctx = self.get_actor()
        tz = get_zone(self.manager.store.get_timezone_name(ctx.organization_id))
        since = timezone.now() - timedelta(days=REPORT_WINDOW_DAYS)

        bookings = self.manager.list_bookings(ctx, start=since).order_by()

        def per_day(qs):
            rows = (
                qs.annotate(day=TruncDate("start_time", tzinfo=tz))
                .values("day")
                .annotate(count=Count("id"))
                .order_by("day")
            )
            return [{"day": row["day"].isoformat(), "count": row["count"]} for row in rows]

        top_services = (
            bookings.values("service_id", "service__name")
            .annotate(count=Count("id"))
            .order_by("-count", "service_id")[:TOP_SERVICES_LIMIT]
        )

        return Response(
            {
                "stats": self.manager.booking_stats(ctx),
                "bookings_per_day": per_day(bookings),
                "cancellations_per_day": per_day(bookings.filter(status=Booking.STATUS_CANCELLED)),
                "top_services": [
                    {
                        "service_id": row["service_id"],
                        "service_name": row["service__name"],
                        "count": row["count"],
                    }
                    for row in top_services
                ],
            }
        )
