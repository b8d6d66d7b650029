import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("booking", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="WeeklySchedule",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("day_of_week", models.PositiveSmallIntegerField()),
                ("start_time", models.CharField(max_length=5)),
                ("end_time", models.CharField(max_length=5)),
                (
                    "staff",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="weekly_schedules",
                        to="booking.staff",
                    ),
                ),
            ],
            options={
                "ordering": ["staff_id", "day_of_week", "start_time"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("day_of_week__lte", 6)), name="weekly_day_of_week_range"
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("end_time__gt", models.F("start_time"))),
                        name="weekly_end_after_start",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ScheduleOverride",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "type",
                    models.CharField(
                        choices=[("day_off", "Day off"), ("time_off", "Time off"), ("extra_work", "Extra work")],
                        max_length=10,
                    ),
                ),
                ("date", models.DateField()),
                ("start_time", models.CharField(blank=True, max_length=5, null=True)),
                ("end_time", models.CharField(blank=True, max_length=5, null=True)),
                ("reason", models.CharField(blank=True, max_length=200)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "staff",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="schedule_overrides",
                        to="booking.staff",
                    ),
                ),
            ],
            options={
                "ordering": ["staff_id", "date", "start_time"],
                "indexes": [models.Index(fields=["staff", "date"], name="override_staff_date_idx")],
            },
        ),
    ]
