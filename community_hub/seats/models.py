from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _


class Seat(models.Model):
    class Room(models.TextChoices):
        WHITE = "white", _("White Room")
        STAFF = "staff", _("Staff Room")

    # Rooms whose seats only privileged actors may claim.
    RESTRICTED_ROOMS = frozenset({Room.STAFF})

    seat_number = models.CharField(
        max_length=10, unique=True, help_text=_("Stable label, e.g. W01 or S07")
    )
    room = models.CharField(
        max_length=20, choices=Room.choices, default=Room.WHITE, db_index=True
    )
    is_available = models.BooleanField(default=True)
    current_holder = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="held_seats",
    )
    reserved_at = models.DateTimeField(null=True, blank=True)
    reserved_until = models.DateTimeField(null=True, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["seat_number"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(
                        is_available=True,
                        current_holder__isnull=True,
                        reserved_until__isnull=True,
                    )
                    | Q(
                        is_available=False,
                        current_holder__isnull=False,
                        reserved_until__isnull=False,
                    )
                ),
                name="seat_hold_fields_consistent",
            ),
        ]

    def __str__(self):
        return f"{self.seat_number} ({self.room})"

    @property
    def is_restricted(self) -> bool:
        return self.room in self.RESTRICTED_ROOMS
