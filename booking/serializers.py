# booking/serializers.py
#
# Purpose:
# - Output serializers for shops, services, staff, bookings and bans.
# - Input serializers for the public booking form, dashboard bookings and
#   booking status changes.
#
# Notes for developers:
# - Business rules (overlap, bans, roles) live in booking/services/*; the
#   serializers only check shape and types.
# - Dates in query strings go through slot_utils.parse_date so malformed input
#   becomes a 400 "invalid_format" before any database access.
#
from rest_framework import serializers

from .models import BannedCustomer, Booking, Organization, Service, Staff
from .services.catalog import ServiceCatalog
from .services.slot_utils import parse_date


class OrganizationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Organization
        fields = ["id", "name", "slug", "timezone"]


class ServiceSerializer(serializers.ModelSerializer):
    price_display = serializers.SerializerMethodField()

    class Meta:
        model = Service
        fields = [
            "id",
            "name",
            "description",
            "duration_minutes",
            "price_cents",
            "price_display",
            "is_active",
        ]

    def get_price_display(self, obj):
        return ServiceCatalog.format_price(obj.price_cents)


class StaffSerializer(serializers.ModelSerializer):
    class Meta:
        model = Staff
        fields = ["id", "name", "email", "role"]


class BookingSerializer(serializers.ModelSerializer):
    service_name = serializers.CharField(source="service.name", read_only=True)
    staff_name = serializers.CharField(source="staff.name", read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "service",
            "service_name",
            "staff",
            "staff_name",
            "start_time",
            "end_time",
            "status",
            "customer_name",
            "customer_phone",
            "notes",
            "price_at_booking",
            "created_at",
        ]


class BannedCustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = BannedCustomer
        fields = ["id", "customer_phone", "reason", "banned_at", "banned_until"]


# -------------------- Input --------------------

class AvailabilityQuerySerializer(serializers.Serializer):
    """?service=ID&date=YYYY-MM-DD[&staff=ID]"""
    service = serializers.IntegerField()
    date = serializers.CharField()
    staff = serializers.CharField(required=False, allow_blank=True)

    def validate_date(self, value):
        return parse_date(value)


class PublicBookingSerializer(serializers.Serializer):
    service = serializers.IntegerField()
    # Omitted or null = "any available"
    staff = serializers.IntegerField(required=False, allow_null=True)
    start_time = serializers.DateTimeField()
    customer_name = serializers.CharField(max_length=200)
    customer_phone = serializers.CharField(max_length=32)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class DashboardBookingSerializer(serializers.Serializer):
    service = serializers.IntegerField()
    staff = serializers.IntegerField()
    start_time = serializers.DateTimeField()
    customer_name = serializers.CharField(max_length=200)
    customer_phone = serializers.CharField(max_length=32)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Booking.STATUS_CHOICES)


class CancelBookingSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500, default="")


class BanCustomerSerializer(serializers.Serializer):
    customer_phone = serializers.CharField(max_length=32)
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500, default="")
    banned_until = serializers.DateTimeField(required=False, allow_null=True, default=None)
