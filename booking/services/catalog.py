# booking/services/catalog.py
#
# Purpose:
# - Shop service catalog (create/update/soft delete) scoped to one organization.
# - Which staff member offers which service.
# - Public, read-only views of a shop: its active services and the staff
#   offering a given service.
#
# Validation mirrors the service form:
# - name 2..100 chars, description <= 500 chars
# - duration 5..480 minutes, price_cents >= 0
#
import logging

from django.db import transaction

from ..exceptions import NotFound, ServiceNotFound, ValidationFailed
from ..models import Organization, Service, Staff, StaffService

logger = logging.getLogger(__name__)


class ServiceCatalog:
    """
    Organization-scoped service management. Writes are owner/admin only.
    """

    @staticmethod
    def validate(data):
        """
        Returns cleaned {name, description, duration_minutes, price_cents}.

        Raises:
            ValidationFailed: with the first problem found.
        """
        name = (data.get("name") or "").strip()
        if not 2 <= len(name) <= 100:
            raise ValidationFailed("Name must be between 2 and 100 characters.")

        description = (data.get("description") or "").strip()
        if len(description) > 500:
            raise ValidationFailed("Description must be at most 500 characters.")

        try:
            duration = int(data.get("duration_minutes"))
        except (TypeError, ValueError):
            raise ValidationFailed("Duration must be a whole number of minutes.")
        if not 5 <= duration <= 480:
            raise ValidationFailed("Duration must be between 5 minutes and 8 hours.")

        try:
            price_cents = int(data.get("price_cents"))
        except (TypeError, ValueError):
            raise ValidationFailed("Price must be a whole number of cents.")
        if price_cents < 0:
            raise ValidationFailed("Price cannot be negative.")

        return {
            "name": name,
            "description": description,
            "duration_minutes": duration,
            "price_cents": price_cents,
        }

    @staticmethod
    def list_services(ctx, include_inactive=False):
        qs = Service.objects.filter(organization_id=ctx.organization_id)
        if not include_inactive:
            qs = qs.filter(is_active=True)
        return qs.order_by("name")

    @staticmethod
    def get_service(ctx, service_id):
        service = Service.objects.filter(pk=service_id, organization_id=ctx.organization_id).first()
        if service is None:
            raise ServiceNotFound()
        return service

    @classmethod
    def create_service(cls, ctx, data):
        ctx.require_manager()
        service = Service.objects.create(organization_id=ctx.organization_id, is_active=True, **cls.validate(data))
        logger.info("Service %s created in organization %s", service.id, ctx.organization_id)
        return service

    @classmethod
    def update_service(cls, ctx, service_id, data):
        """
        Existing bookings keep their price_at_booking and end_time; only future
        bookings see the new price/duration.
        """
        ctx.require_manager()
        service = cls.get_service(ctx, service_id)
        for field, value in cls.validate(data).items():
            setattr(service, field, value)
        service.save()
        return service

    @classmethod
    def deactivate_service(cls, ctx, service_id):
        """Soft delete: the service disappears from the public catalog and availability."""
        ctx.require_manager()
        service = cls.get_service(ctx, service_id)
        service.is_active = False
        service.save(update_fields=["is_active", "updated_at"])
        logger.info("Service %s deactivated", service.id)
        return service

    @staticmethod
    def format_price(price_cents, currency_symbol="$"):
        """2500 -> "$25.00" """
        return f"{currency_symbol}{price_cents // 100}.{price_cents % 100:02d}"


# ============ Staff ↔ service assignment ============

def get_staff_services(staff_id):
    return list(StaffService.objects.filter(staff_id=staff_id).values_list("service_id", flat=True))


def assign_services(ctx, staff_id, service_ids):
    """Replace the set of services a staff member offers (owner/admin only)."""
    ctx.require_manager()
    if not Staff.objects.filter(pk=staff_id, organization_id=ctx.organization_id).exists():
        raise NotFound("Member not found in your organization.")

    service_ids = list(dict.fromkeys(service_ids))
    known = set(
        Service.objects.filter(pk__in=service_ids, organization_id=ctx.organization_id).values_list("id", flat=True)
    )
    unknown = [sid for sid in service_ids if sid not in known]
    if unknown:
        raise ValidationFailed(f"Unknown services: {unknown}")

    with transaction.atomic():
        StaffService.objects.filter(staff_id=staff_id).delete()
        StaffService.objects.bulk_create([StaffService(staff_id=staff_id, service_id=sid) for sid in service_ids])
    return get_staff_services(staff_id)


# ============ Public shop data ============

def get_organization_by_slug(slug):
    organization = Organization.objects.filter(slug=slug).first()
    if organization is None:
        raise NotFound("Shop not found.")
    return organization


def get_public_services(organization):
    return Service.objects.filter(organization=organization, is_active=True).order_by("name")


def get_staff_for_service(organization, service_id):
    return (
        Staff.objects.filter(organization=organization, service_links__service_id=service_id)
        .order_by("id")
        .distinct()
    )
