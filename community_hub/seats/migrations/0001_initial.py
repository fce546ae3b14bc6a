import django.db.models.deletion
from django.conf import settings
from django.db import migrations
from django.db import models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Seat",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "seat_number",
                    models.CharField(
                        help_text="Stable label, e.g. W01 or S07",
                        max_length=10,
                        unique=True,
                    ),
                ),
                (
                    "room",
                    models.CharField(
                        choices=[("white", "White Room"), ("staff", "Staff Room")],
                        db_index=True,
                        default="white",
                        max_length=20,
                    ),
                ),
                ("is_available", models.BooleanField(default=True)),
                ("reserved_at", models.DateTimeField(blank=True, null=True)),
                (
                    "reserved_until",
                    models.DateTimeField(blank=True, db_index=True, null=True),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "current_holder",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="held_seats",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["seat_number"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(
                                ("current_holder__isnull", True),
                                ("is_available", True),
                                ("reserved_until__isnull", True),
                            ),
                            models.Q(
                                ("current_holder__isnull", False),
                                ("is_available", False),
                                ("reserved_until__isnull", False),
                            ),
                            _connector="OR",
                        ),
                        name="seat_hold_fields_consistent",
                    )
                ],
            },
        ),
    ]
