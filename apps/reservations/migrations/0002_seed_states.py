from django.db import migrations

STATES = [
    ("Pending", "Awaiting confirmation"),
    ("Confirmed", "Confirmed, the product is booked for these dates"),
    ("Cancelled", "Cancelled by the user or an administrator"),
    ("Completed", "Rental finished"),
]


def seed_states(apps, schema_editor):
    ReservationState = apps.get_model("reservations", "ReservationState")
    for name, description in STATES:
        ReservationState.objects.get_or_create(
            name=name,
            defaults={"description": description, "is_active": True},
        )


def remove_states(apps, schema_editor):
    ReservationState = apps.get_model("reservations", "ReservationState")
    ReservationState.objects.filter(name__in=[name for name, _ in STATES]).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("reservations", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_states, remove_states),
    ]
