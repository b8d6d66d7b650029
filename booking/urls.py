# booking/urls.py
#
# Purpose:
# - Expose the booking app's REST API via a DRF router (mounted under /api/).
#
# Routes:
# - shops/{slug}/ , shops/{slug}/staff/        public shop data
# - bookings/availability/ , bookings/public/  public booking flow
# - bookings/ ...                              dashboard bookings
# - services/ ...                              organization service catalog
# - customers/banned/ ...                      customer bans
#
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import BannedCustomerViewSet, BookingViewSet, ServiceViewSet, ShopViewSet

router = DefaultRouter()
router.register(r"shops", ShopViewSet, basename="shop")
router.register(r"bookings", BookingViewSet, basename="booking")
router.register(r"services", ServiceViewSet, basename="service")
router.register(r"customers/banned", BannedCustomerViewSet, basename="banned-customer")

urlpatterns = [
    path("", include(router.urls)),
]
