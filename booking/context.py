# booking/context.py
#
# Purpose:
# - Explicit request context passed into dashboard operations
#   (who is acting, for which organization, with which role).
# - Staff choice for availability/booking: a specific barber or "any available".
#
# The context is resolved once per request in the views (get_actor_context) and
# handed to the services; nothing in the services reads request/session state.
#
from dataclasses import dataclass
from typing import Optional, Union

from .exceptions import FormatError, NotAuthorized


@dataclass(frozen=True)
class ActorContext:
    organization_id: int
    staff_id: Optional[int]
    role: str

    @property
    def is_manager(self) -> bool:
        return self.role in ("owner", "admin")

    def require_manager(self):
        if not self.is_manager:
            raise NotAuthorized("Only owners and admins can do that.")

    def can_manage_staff(self, staff_id) -> bool:
        """Managers can act on any staff member; members only on themselves."""
        return self.is_manager or (self.staff_id is not None and self.staff_id == staff_id)


@dataclass(frozen=True)
class SpecificStaff:
    staff_id: int


@dataclass(frozen=True)
class AnyAvailable:
    pass


ANY_AVAILABLE = AnyAvailable()

StaffChoice = Union[SpecificStaff, AnyAvailable]


def staff_choice_from(staff_id) -> StaffChoice:
    """Map an optional staff id (query param / payload value) to a StaffChoice."""
    if staff_id in (None, ""):
        return ANY_AVAILABLE
    try:
        return SpecificStaff(int(staff_id))
    except (TypeError, ValueError):
        raise FormatError(f"Invalid staff id {staff_id!r}.")


def get_actor_context(request, organization_id=None) -> ActorContext:
    """
    Resolve the acting staff membership from the authenticated user.

    If the user belongs to several organizations, `organization_id` (for example
    from the X-Organization header) picks one; otherwise the first membership is used.
    """
    from .models import Staff

    user = getattr(request, "user", None)
    if not user or not user.is_authenticated:
        raise NotAuthorized("Not authenticated.")

    memberships = Staff.objects.filter(user=user).order_by("id")
    if organization_id:
        try:
            organization_id = int(organization_id)
        except (TypeError, ValueError):
            raise FormatError(f"Invalid organization id {organization_id!r}.")
        memberships = memberships.filter(organization_id=organization_id)
    member = memberships.first()
    if member is None:
        raise NotAuthorized("Not a member of this organization.")

    return ActorContext(organization_id=member.organization_id, staff_id=member.id, role=member.role)


def optional_int(value, name):
    """Query/header value -> int, or None when missing."""
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise FormatError(f"Invalid '{name}': {value!r}.")


class ActorContextMixin:
    """For DRF views: resolves the acting staff membership once per request."""

    def get_actor(self):
        if not hasattr(self, "_actor"):
            self._actor = get_actor_context(self.request, self.request.headers.get("X-Organization"))
        return self._actor
