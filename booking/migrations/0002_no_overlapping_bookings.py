# Range-exclusion constraint for active bookings (PostgreSQL only).
#
# Two active (pending/confirmed) bookings for the same staff member may not
# overlap on [start_time, end_time). Other backends rely on the locked re-check
# in booking.services.store.BookingStore.insert_booking.
from django.db import migrations

CONSTRAINT = "no_overlapping_bookings"


def add_exclusion_constraint(apps, schema_editor):
    if schema_editor.connection.vendor != "postgresql":
        return
    table = apps.get_model("booking", "Booking")._meta.db_table
    schema_editor.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
    schema_editor.execute(
        f"ALTER TABLE {table} ADD CONSTRAINT {CONSTRAINT} EXCLUDE USING gist ("
        "staff_id WITH =, tstzrange(start_time, end_time, '[)') WITH &&"
        ") WHERE (status IN ('pending', 'confirmed'))"
    )


def drop_exclusion_constraint(apps, schema_editor):
    if schema_editor.connection.vendor != "postgresql":
        return
    table = apps.get_model("booking", "Booking")._meta.db_table
    schema_editor.execute(f"ALTER TABLE {table} DROP CONSTRAINT IF EXISTS {CONSTRAINT}")


class Migration(migrations.Migration):

    dependencies = [
        ("booking", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(add_exclusion_constraint, drop_exclusion_constraint),
    ]
