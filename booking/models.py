# booking/models.py
#
# Purpose:
# - Core domain models for the multi-shop booking system.
#
# Design highlights:
# - Organization: one barbershop (tenant). Everything else hangs off it.
# - Staff: a member of an organization with a role (owner/admin/member).
#   • Optional link to auth User; dashboard requests resolve the actor through it.
# - Service: duration drives slot length; "is_active" is a soft delete flag.
# - StaffService: which staff member offers which service.
# - Booking:
#   • end_time is computed once at creation (start + service duration) and stored
#   • price_at_booking snapshots the service price in cents
#   • only "pending" and "confirmed" occupy the staff member's time
# - BannedCustomer: per-organization phone ban with optional expiry.
#
# Notes for developers:
# - The no-overlap rule for bookings is enforced by the database on PostgreSQL
#   (exclusion constraint added by migration 0002_no_overlapping_bookings) and by
#   the locked re-check in BookingStore.insert_booking on every backend.
#

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import F, Q


def validate_timezone_name(value):
    """Reject names zoneinfo cannot load ("Europe/Istanbul" ok, "Mars/Olympus" not)."""
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown timezone {value!r}.", code="invalid_timezone")


# -------------------------
# Organization (tenant)
# -------------------------
class Organization(models.Model):
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=100, unique=True)
    timezone = models.CharField(
        max_length=64,
        blank=True,
        help_text="IANA timezone used to interpret schedule times. Empty = settings.TIME_ZONE.",
        validators=[validate_timezone_name],
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        # Checked on every save, not only in forms: availability loads this zone per request
        if self.timezone:
            validate_timezone_name(self.timezone)
        super().save(*args, **kwargs)


# -------------------------
# Staff member / Barber
# -------------------------
class Staff(models.Model):
    """
    A barber or manager working for one organization.
    """
    ROLE_OWNER = "owner"
    ROLE_ADMIN = "admin"
    ROLE_MEMBER = "member"
    ROLE_CHOICES = [
        (ROLE_OWNER, "Owner"),
        (ROLE_ADMIN, "Admin"),
        (ROLE_MEMBER, "Member"),
    ]

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="staff")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="staff_memberships",
    )
    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_MEMBER)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "user"], name="uniq_staff_user_per_organization"
            ),
        ]

    def __str__(self):
        return self.name

    @property
    def is_manager(self):
        return self.role in (self.ROLE_OWNER, self.ROLE_ADMIN)


# -------------------------
# Service catalog item
# -------------------------
class Service(models.Model):
    """
    A service offered by a shop.

    Rules:
    - duration_minutes between 5 and 480
    - price_cents >= 0
    - is_active controls visibility and bookability (delete = deactivate)
    """
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="services")
    name = models.CharField(max_length=100)
    description = models.CharField(max_length=500, blank=True)
    duration_minutes = models.PositiveIntegerField(
        validators=[MinValueValidator(5), MaxValueValidator(480)]
    )
    price_cents = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.duration_minutes} min)"


class StaffService(models.Model):
    staff = models.ForeignKey(Staff, on_delete=models.CASCADE, related_name="service_links")
    service = models.ForeignKey(Service, on_delete=models.CASCADE, related_name="staff_links")

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["staff", "service"], name="uniq_staff_service"),
        ]

    def __str__(self):
        return f"{self.staff} → {self.service}"


# -------------------------
# Booking record
# -------------------------
class Booking(models.Model):
    """
    Appointment booking.

    status keeps history; cancelled/completed/no_show rows no longer block the slot.
    """
    STATUS_PENDING = "pending"
    STATUS_CONFIRMED = "confirmed"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"
    STATUS_NO_SHOW = "no_show"
    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_CONFIRMED, "Confirmed"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
        (STATUS_NO_SHOW, "No show"),
    ]
    ACTIVE_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED)

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="bookings")
    service = models.ForeignKey(Service, on_delete=models.PROTECT, related_name="bookings")
    staff = models.ForeignKey(Staff, on_delete=models.PROTECT, related_name="bookings")
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)
    customer_name = models.CharField(max_length=200)
    customer_phone = models.CharField(max_length=32)
    notes = models.TextField(blank=True)
    price_at_booking = models.PositiveIntegerField(help_text="Service price in cents when booked.")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start_time"]
        indexes = [
            models.Index(fields=["staff", "start_time"], name="booking_staff_start_idx"),
            models.Index(fields=["organization", "status"], name="booking_org_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_time__gt=F("start_time")), name="booking_end_after_start"
            ),
        ]

    def __str__(self):
        return f"{self.customer_name} → {self.service.name} on {self.start_time}"

    @property
    def is_active(self):
        return self.status in self.ACTIVE_STATUSES


# -------------------------
# Banned customers
# -------------------------
class BannedCustomer(models.Model):
    organization = models.ForeignKey(
        Organization, on_delete=models.CASCADE, related_name="banned_customers"
    )
    customer_phone = models.CharField(max_length=32)
    reason = models.CharField(max_length=500, blank=True)
    banned_at = models.DateTimeField()
    banned_until = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-banned_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "customer_phone"], name="uniq_ban_per_organization_phone"
            ),
        ]

    def __str__(self):
        return f"{self.customer_phone} banned at {self.organization}"

    def save(self, *args, **kwargs):
        # Admin and fixtures may enter formatted numbers; lookups match digits only
        from .services.customer_bans import normalize_phone

        self.customer_phone = normalize_phone(self.customer_phone)
        super().save(*args, **kwargs)

    def is_in_effect(self, as_of):
        return self.banned_until is None or self.banned_until > as_of
