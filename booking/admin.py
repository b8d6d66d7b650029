from django.contrib import admin

from .models import BannedCustomer, Booking, Organization, Service, Staff, StaffService


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "slug", "timezone")
    search_fields = ("name", "slug")
    prepopulated_fields = {"slug": ("name",)}


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "organization", "price_cents", "duration_minutes", "is_active")
    list_filter = ("is_active", "organization")
    search_fields = ("name",)
    list_editable = ("price_cents", "duration_minutes", "is_active")


@admin.register(Staff)
class StaffAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "organization", "email", "role")
    list_filter = ("role", "organization")
    search_fields = ("name", "email")


@admin.register(StaffService)
class StaffServiceAdmin(admin.ModelAdmin):
    list_display = ("staff", "service")
    list_filter = ("service__organization",)


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    # Saving through the admin bypasses BookingManager; the database constraint
    # still rejects overlaps on PostgreSQL.
    list_display = ("id", "customer_name", "service", "staff", "start_time", "end_time", "status")
    list_filter = ("status", "organization", "service")
    search_fields = ("customer_name", "customer_phone", "service__name")
    date_hierarchy = "start_time"


@admin.register(BannedCustomer)
class BannedCustomerAdmin(admin.ModelAdmin):
    list_display = ("customer_phone", "organization", "reason", "banned_at", "banned_until")
    list_filter = ("organization",)
    search_fields = ("customer_phone",)
