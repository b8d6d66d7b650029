# booking/views.py
#
# Purpose:
# - Public APIs: shop lookup, availability, public booking (no login).
# - Dashboard APIs (login + staff membership): bookings, services, customer bans.
#
# Permissions:
# - Public endpoints are AllowAny.
# - Dashboard endpoints resolve an ActorContext from request.user first;
#   role checks (owner/admin vs member) happen in the services.
#
# Errors:
# - Services raise booking.exceptions.BookingError subclasses; the DRF exception
#   handler (booking/exception_handler.py) turns them into
#   {"detail": ..., "code": ...} with the matching status code.
#
from django.utils import timezone
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .context import ActorContextMixin, optional_int, staff_choice_from
from .exceptions import ServiceNotFound, ValidationFailed
from .serializers import (
    AvailabilityQuerySerializer,
    BanCustomerSerializer,
    BannedCustomerSerializer,
    BookingSerializer,
    BookingStatusSerializer,
    CancelBookingSerializer,
    DashboardBookingSerializer,
    OrganizationSerializer,
    PublicBookingSerializer,
    ServiceSerializer,
    StaffSerializer,
)
from .services import customer_bans
from .services.availability_engine import AvailabilityEngine
from .services.booking_manager import BookingManager
from .services.catalog import (
    ServiceCatalog,
    get_organization_by_slug,
    get_public_services,
    get_staff_for_service,
)
from .services.slot_utils import get_zone, parse_date
from .services.store import BookingStore


def service_organization_id(service_id):
    """Owning organization of a service, or None if the service does not exist."""
    if service_id is None:
        return None
    service = BookingStore().get_service(service_id)
    return service.organization_id if service else None


def shop_zone(organization_id):
    """
    Timezone that offset-less start_time values are read in.
    Slots are listed in the shop's local time, so "2030-01-07T09:00" means 09:00 at the shop.
    """
    return get_zone(BookingStore().get_timezone_name(organization_id))


# -------------------- Public shop pages --------------------
class ShopViewSet(viewsets.ViewSet):
    """
    GET /api/shops/{slug}/                  shop + active services
    GET /api/shops/{slug}/staff/?service=ID staff offering that service
    """
    permission_classes = [AllowAny]
    lookup_field = "slug"

    def retrieve(self, request, slug=None):
        organization = get_organization_by_slug(slug)
        data = OrganizationSerializer(organization).data
        data["services"] = ServiceSerializer(get_public_services(organization), many=True).data
        return Response(data)

    @action(detail=True, methods=["get"])
    def staff(self, request, slug=None):
        organization = get_organization_by_slug(slug)
        service_id = optional_int(request.query_params.get("service"), "service")
        if service_id is None:
            raise ValidationFailed("Missing 'service'.")
        staff = get_staff_for_service(organization, service_id)
        return Response(StaffSerializer(staff, many=True).data)


# -------------------- Bookings --------------------
class BookingViewSet(ActorContextMixin, viewsets.ViewSet):
    """
    Endpoints:
    - GET    /api/bookings/availability/      open slots (public)
    - POST   /api/bookings/public/            public booking (no login)
    - GET    /api/bookings/                   dashboard list (?status=a,b&start=&end=&staff=)
    - POST   /api/bookings/                   dashboard booking (owner/admin)
    - GET    /api/bookings/{id}/
    - POST   /api/bookings/{id}/cancel/       {"reason": "..."}
    - POST   /api/bookings/{id}/status/       {"status": "..."}
    """
    lookup_value_regex = r"\d+"
    manager = BookingManager()
    engine = AvailabilityEngine()

    def get_permissions(self):
        if self.action in ("availability", "public"):
            return [AllowAny()]
        return super().get_permissions()

    @action(detail=False, methods=["get"], url_path="availability")
    def availability(self, request):
        """
        GET /api/bookings/availability/?service=ID&date=YYYY-MM-DD[&staff=ID]

        Without `staff` the slots are the union over every barber offering the
        service and carry staff_id=null.
        """
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data
        staff_choice = staff_choice_from(params.get("staff"))

        organization_id = service_organization_id(params["service"])
        if organization_id is None:
            return Response({"slots": []})

        slots = self.engine.get_available_slots(organization_id, params["service"], staff_choice, params["date"])
        return Response({"slots": [slot.as_dict() for slot in slots]})

    @action(detail=False, methods=["post"], url_path="public")
    def public(self, request):
        organization_id = service_organization_id(optional_int(request.data.get("service"), "service"))
        serializer = PublicBookingSerializer(data=request.data)
        with timezone.override(shop_zone(organization_id)):
            serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if organization_id is None:
            raise ServiceNotFound()

        booking = self.manager.create_public_booking(
            organization_id=organization_id,
            service_id=data["service"],
            staff_choice=staff_choice_from(data.get("staff")),
            start_time=data["start_time"],
            customer_name=data["customer_name"],
            customer_phone=data["customer_phone"],
            notes=data.get("notes", ""),
        )
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    def list(self, request):
        params = request.query_params
        statuses = [s for s in (params.get("status") or "").split(",") if s]
        start = parse_date(params["start"]) if params.get("start") else None
        end = parse_date(params["end"]) if params.get("end") else None
        staff_id = optional_int(params.get("staff"), "staff")

        qs = self.manager.list_bookings(
            self.get_actor(),
            status=statuses or None,
            start=start,
            end=end,
            staff_id=staff_id,
        )
        return Response(BookingSerializer(qs, many=True).data)

    def create(self, request):
        ctx = self.get_actor()
        serializer = DashboardBookingSerializer(data=request.data)
        with timezone.override(shop_zone(ctx.organization_id)):
            serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        booking = self.manager.create_dashboard_booking(
            ctx,
            service_id=data["service"],
            staff_id=data["staff"],
            start_time=data["start_time"],
            customer_name=data["customer_name"],
            customer_phone=data["customer_phone"],
            notes=data.get("notes", ""),
        )
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        booking = self.manager.get_booking(self.get_actor(), pk)
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        ctx = self.get_actor()
        serializer = CancelBookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = self.manager.cancel_booking(ctx, pk, serializer.validated_data.get("reason", ""))
        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        ctx = self.get_actor()
        serializer = BookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = self.manager.update_status(ctx, pk, serializer.validated_data["status"])
        return Response(BookingSerializer(booking).data)


# -------------------- Services --------------------
class ServiceViewSet(ActorContextMixin, viewsets.ViewSet):
    """
    Organization service catalog:
    - Any staff member can list/read; ?all=1 includes deactivated services.
    - Only owners/admins can create/update/delete (delete = deactivate).
    """
    lookup_value_regex = r"\d+"

    def list(self, request):
        include_inactive = request.query_params.get("all") in ("1", "true")
        services = ServiceCatalog.list_services(self.get_actor(), include_inactive=include_inactive)
        return Response(ServiceSerializer(services, many=True).data)

    def retrieve(self, request, pk=None):
        service = ServiceCatalog.get_service(self.get_actor(), pk)
        return Response(ServiceSerializer(service).data)

    def create(self, request):
        service = ServiceCatalog.create_service(self.get_actor(), request.data)
        return Response(ServiceSerializer(service).data, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        service = ServiceCatalog.update_service(self.get_actor(), pk, request.data)
        return Response(ServiceSerializer(service).data)

    def partial_update(self, request, pk=None):
        ctx = self.get_actor()
        current = ServiceCatalog.get_service(ctx, pk)
        data = {
            "name": current.name,
            "description": current.description,
            "duration_minutes": current.duration_minutes,
            "price_cents": current.price_cents,
        }
        data.update({key: value for key, value in request.data.items() if key in data})
        service = ServiceCatalog.update_service(ctx, pk, data)
        return Response(ServiceSerializer(service).data)

    def destroy(self, request, pk=None):
        ServiceCatalog.deactivate_service(self.get_actor(), pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


# -------------------- Customer bans --------------------
class BannedCustomerViewSet(ActorContextMixin, viewsets.ViewSet):
    """
    GET    /api/customers/banned/
    POST   /api/customers/banned/      {"customer_phone", "reason", "banned_until"}
    DELETE /api/customers/banned/{id}/
    """
    lookup_value_regex = r"\d+"

    def list(self, request):
        bans = customer_bans.list_banned_customers(self.get_actor())
        return Response(BannedCustomerSerializer(bans, many=True).data)

    def create(self, request):
        ctx = self.get_actor()
        serializer = BanCustomerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        ban = customer_bans.ban_customer(
            ctx,
            data["customer_phone"],
            reason=data.get("reason", ""),
            banned_until=data.get("banned_until"),
        )
        return Response(BannedCustomerSerializer(ban).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        customer_bans.unban_customer(self.get_actor(), pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
