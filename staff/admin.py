# staff/admin.py
from django.contrib import admin

from .models import ScheduleOverride, WeeklySchedule


@admin.register(WeeklySchedule)
class WeeklyScheduleAdmin(admin.ModelAdmin):
    list_display = ("staff", "day_of_week", "start_time", "end_time")
    list_filter = ("day_of_week", "staff__organization")
    search_fields = ("staff__name",)


@admin.register(ScheduleOverride)
class ScheduleOverrideAdmin(admin.ModelAdmin):
    list_display = ("staff", "type", "date", "start_time", "end_time", "reason")
    list_filter = ("type", "staff__organization")
    search_fields = ("staff__name", "reason")
    date_hierarchy = "date"
