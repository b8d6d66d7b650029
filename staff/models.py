# staff/models.py
#
# Recurring weekly schedules and date-specific overrides for staff members.
# Times are "HH:MM" strings in the organization's local time.
#
from django.db import models
from django.db.models import F, Q


class WeeklySchedule(models.Model):
    """
    A recurring working window. Several rows per day are allowed (split shifts).
    day_of_week: 0 = Sunday .. 6 = Saturday.
    """
    staff = models.ForeignKey(
        "booking.Staff",
        on_delete=models.CASCADE,
        related_name="weekly_schedules",
    )
    day_of_week = models.PositiveSmallIntegerField()
    start_time = models.CharField(max_length=5)
    end_time = models.CharField(max_length=5)

    class Meta:
        ordering = ["staff_id", "day_of_week", "start_time"]
        constraints = [
            models.CheckConstraint(condition=Q(day_of_week__lte=6), name="weekly_day_of_week_range"),
            models.CheckConstraint(
                condition=Q(end_time__gt=F("start_time")), name="weekly_end_after_start"
            ),
        ]

    def __str__(self):
        return f"{self.staff.name}: day {self.day_of_week} {self.start_time}-{self.end_time}"


class ScheduleOverride(models.Model):
    """
    A one-off exception to the weekly schedule.

    - day_off:    no bounds, voids the whole date
    - time_off:   start/end required, blocks that window
    - extra_work: start/end required, adds working time
    """
    TYPE_DAY_OFF = "day_off"
    TYPE_TIME_OFF = "time_off"
    TYPE_EXTRA_WORK = "extra_work"
    TYPE_CHOICES = [
        (TYPE_DAY_OFF, "Day off"),
        (TYPE_TIME_OFF, "Time off"),
        (TYPE_EXTRA_WORK, "Extra work"),
    ]

    staff = models.ForeignKey(
        "booking.Staff",
        on_delete=models.CASCADE,
        related_name="schedule_overrides",
    )
    type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    date = models.DateField()
    start_time = models.CharField(max_length=5, null=True, blank=True)
    end_time = models.CharField(max_length=5, null=True, blank=True)
    reason = models.CharField(max_length=200, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["staff_id", "date", "start_time"]
        indexes = [models.Index(fields=["staff", "date"], name="override_staff_date_idx")]

    def __str__(self):
        window = f" {self.start_time}-{self.end_time}" if self.start_time else ""
        return f"{self.staff.name}: {self.type} on {self.date}{window}"
