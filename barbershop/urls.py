# barbershop/urls.py
#
# Purpose:
# - Project URL router.
# - All JSON APIs live under /api/; the Django admin stays at /admin/.
#
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/staff/", include("staff.urls")),
    path("api/reports/", include("reports.urls")),
    path("api/", include("booking.urls")),
]
