# booking/exception_handler.py
#
# Purpose:
# - DRF exception handler that turns domain errors (booking.exceptions.BookingError)
#   into {"detail": ..., "code": ...} responses with the error's HTTP status.
# - Everything else goes through DRF's default handler; errors DRF does not
#   know about still propagate as a 500.
#
import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from .exceptions import BookingError

logger = logging.getLogger(__name__)


def booking_exception_handler(exc, context):
    if isinstance(exc, BookingError):
        view = context.get("view")
        logger.info(
            "%s rejected in %s: %s",
            exc.code,
            view.__class__.__name__ if view is not None else "unknown view",
            exc.message,
        )
        return Response(exc.as_dict(), status=exc.status_code)
    return drf_exception_handler(exc, context)
