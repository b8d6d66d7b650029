# booking/exceptions.py
#
# Purpose:
# - Domain errors raised by the booking services.
# - Each error carries a stable `code` and an HTTP `status_code` so the views
#   can answer with {"detail": ..., "code": ...} without guessing.
#
# Notes:
# - Only these errors are translated by the API layer. Anything else
#   (database outages, programming errors) propagates as a 500.
#


class BookingError(Exception):
    code = "booking_error"
    status_code = 400
    default_message = "The request could not be completed."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_dict(self):
        return {"detail": self.message, "code": self.code}


class FormatError(BookingError, ValueError):
    """Malformed time string, date or day-of-week."""
    code = "invalid_format"
    default_message = "Invalid format."


class ValidationFailed(BookingError):
    code = "validation_error"
    default_message = "Invalid data."


class NotFound(BookingError):
    code = "not_found"
    status_code = 404
    default_message = "Not found."


class ServiceNotFound(NotFound):
    code = "service_not_found"
    default_message = "Service not found."


class BookingNotFound(NotFound):
    code = "booking_not_found"
    default_message = "Booking not found."


class NotAuthorized(BookingError):
    code = "not_authorized"
    status_code = 403
    default_message = "You are not allowed to do that."


class CustomerBanned(BookingError):
    code = "customer_banned"
    status_code = 403
    default_message = "Using this phone number for booking is currently restricted."


class NoStaffAvailable(BookingError):
    code = "no_staff_available"
    status_code = 409
    default_message = "No staff available at this time."


class SlotNoLongerAvailable(BookingError):
    code = "slot_no_longer_available"
    status_code = 409
    default_message = "This time slot is no longer available. Please choose another time."
