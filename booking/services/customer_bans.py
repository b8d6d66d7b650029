# booking/services/customer_bans.py
#
# Purpose:
# - Per-organization customer bans, keyed by phone number.
# - Phones are compared digits-only so "+1 (555) 123-4567" and "15551234567"
#   are the same customer.
# - A ban without banned_until never expires; otherwise it stops applying once
#   banned_until has passed.
#
import logging
import re

from django.utils import timezone

from ..exceptions import NotFound, ValidationFailed
from ..models import BannedCustomer

logger = logging.getLogger(__name__)

NON_DIGITS_RE = re.compile(r"\D")


def normalize_phone(phone) -> str:
    """'+90 555 123 4567' -> '905551234567'"""
    return NON_DIGITS_RE.sub("", phone or "")


def find_ban(organization_id, phone):
    # Phones are stored digits-only (BannedCustomer.save)
    normalized = normalize_phone(phone)
    if not normalized:
        return None
    return BannedCustomer.objects.filter(organization_id=organization_id, customer_phone=normalized).first()


def is_customer_banned(organization_id, phone, as_of=None) -> dict:
    """
    Returns {"banned": bool, "reason": str | None, "banned_until": datetime | None}.
    """
    as_of = as_of or timezone.now()
    ban = find_ban(organization_id, phone)
    if ban is None or not ban.is_in_effect(as_of):
        return {"banned": False, "reason": None, "banned_until": None}
    return {"banned": True, "reason": ban.reason or None, "banned_until": ban.banned_until}


def list_banned_customers(ctx):
    ctx.require_manager()
    return list(BannedCustomer.objects.filter(organization_id=ctx.organization_id).order_by("-banned_at"))


def ban_customer(ctx, customer_phone, reason="", banned_until=None) -> BannedCustomer:
    """Create the ban, or refresh reason/expiry when the phone is already banned."""
    ctx.require_manager()
    normalized = normalize_phone(customer_phone)
    if not normalized:
        raise ValidationFailed("A phone number with at least one digit is required.")

    now = timezone.now()
    ban = find_ban(ctx.organization_id, normalized)
    if ban is None:
        ban = BannedCustomer.objects.create(
            organization_id=ctx.organization_id,
            customer_phone=normalized,
            reason=reason or "",
            banned_until=banned_until,
            banned_at=now,
        )
        logger.info("Banned phone %s in organization %s", normalized, ctx.organization_id)
    else:
        ban.reason = reason or ""
        ban.banned_until = banned_until
        ban.banned_at = now
        ban.save(update_fields=["reason", "banned_until", "banned_at", "updated_at"])
        logger.info("Updated ban for phone %s in organization %s", normalized, ctx.organization_id)
    return ban


def unban_customer(ctx, ban_id) -> bool:
    ctx.require_manager()
    deleted, _ = BannedCustomer.objects.filter(pk=ban_id, organization_id=ctx.organization_id).delete()
    if not deleted:
        raise NotFound("Ban not found.")
    return True
