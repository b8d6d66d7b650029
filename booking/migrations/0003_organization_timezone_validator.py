from django.db import migrations, models

import booking.models


class Migration(migrations.Migration):

    dependencies = [
        ("booking", "0002_no_overlapping_bookings"),
    ]

    operations = [
        migrations.AlterField(
            model_name="organization",
            name="timezone",
            field=models.CharField(
                blank=True,
                help_text="IANA timezone used to interpret schedule times. Empty = settings.TIME_ZONE.",
                max_length=64,
                validators=[booking.models.validate_timezone_name],
            ),
        ),
    ]
