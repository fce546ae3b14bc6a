"""Seat reservation, release and expiry.

Every mutation is a single conditional ``UPDATE`` on one seat row (or a
set-based ``UPDATE`` for the sweep), so competing writers are serialized by the
database. The one place an invariant spans rows, "an actor holds at most one
seat", is enforced after the fact in :meth:`ReservationManager.claim`:

1. claim the target seat only if it is still available;
2. list the seats the actor now holds, oldest hold first;
3. if the claimed seat is not the oldest, release it and report a conflict.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from datetime import timedelta
from typing import Any

from django.conf import settings
from django.db import DatabaseError
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from community_hub.core.exceptions import ReservationFatalError
from community_hub.core.exceptions import ValidationError
from community_hub.seats.exceptions import DuplicateReservation
from community_hub.seats.exceptions import ReleaseForbidden
from community_hub.seats.exceptions import RestrictedRoom
from community_hub.seats.exceptions import SeatNotFound
from community_hub.seats.exceptions import SeatTaken
from community_hub.seats.models import Seat

logger = logging.getLogger(__name__)

ALL_ROOMS = "all"
MIN_HOURS = 1


def _cleared_hold(now: datetime) -> dict[str, Any]:
    return {
        "is_available": True,
        "current_holder": None,
        "reserved_at": None,
        "reserved_until": None,
        "updated_at": now,
    }


class ReservationManager:
    """Claims and releases seats on behalf of a single actor per call.

    ``clock`` returns the current aware datetime; tests inject a fixed one.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = timezone.now,
        max_hours: int | None = None,
    ):
        self.clock = clock
        self.max_hours = max_hours or settings.SEAT_MAX_HOURS

    def list_seats(self, room: str | None = None) -> list[Seat]:
        qs = Seat.objects.select_related("current_holder")
        if room and room != ALL_ROOMS:
            qs = qs.filter(room=room)
        return list(qs.order_by("seat_number"))

    def my_reservation(self, actor) -> Seat | None:
        return (
            Seat.objects.select_related("current_holder")
            .filter(current_holder=actor, is_available=False)
            .first()
        )

    def claim(
        self,
        actor,
        seat_number: str,
        duration_hours: int,
        *,
        is_privileged: bool = False,
    ) -> Seat:
        self._validate_duration(duration_hours)

        seat = Seat.objects.filter(seat_number=seat_number).first()
        if seat is None:
            raise SeatNotFound
        if seat.is_restricted and not is_privileged:
            raise RestrictedRoom

        held = self.my_reservation(actor)
        if held is not None:
            raise DuplicateReservation(current_seat=held.seat_number)

        now = self.clock()
        claimed = Seat.objects.filter(seat_number=seat_number, is_available=True).update(
            is_available=False,
            current_holder=actor,
            reserved_at=now,
            reserved_until=now + timedelta(hours=duration_hours),
            updated_at=now,
        )
        if not claimed:
            if not Seat.objects.filter(seat_number=seat_number).exists():
                raise SeatNotFound
            raise SeatTaken

        self._reconcile(actor, seat_number)
        logger.info(
            "Seat %s reserved by user %s for %sh", seat_number, actor.pk, duration_hours
        )
        return Seat.objects.select_related("current_holder").get(
            seat_number=seat_number
        )

    def release(self, actor, seat_number: str, *, is_privileged: bool = False) -> Seat:
        predicate: dict[str, Any] = {"seat_number": seat_number, "is_available": False}
        if not is_privileged:
            predicate["current_holder"] = actor

        released = Seat.objects.filter(**predicate).update(**_cleared_hold(self.clock()))
        if not released:
            if not Seat.objects.filter(seat_number=seat_number).exists():
                raise SeatNotFound
            raise ReleaseForbidden

        logger.info("Seat %s released by user %s", seat_number, actor.pk)
        return Seat.objects.get(seat_number=seat_number)

    def _validate_duration(self, duration_hours: int) -> None:
        if (
            isinstance(duration_hours, bool)
            or not isinstance(duration_hours, int)
            or not MIN_HOURS <= duration_hours <= self.max_hours
        ):
            msg = _("Hours must be between %(min)s and %(max)s.") % {
                "min": MIN_HOURS,
                "max": self.max_hours,
            }
            raise ValidationError({"hours": [msg]})

    def _reconcile(self, actor, seat_number: str) -> None:
        """Undo the claim on ``seat_number`` if the actor holds an older seat.

        Two claims by the same actor on different seats can both pass the
        pre-check. Every reconciliation ranks the actor's held seats by
        ``(reserved_at, pk)`` and only the oldest hold survives, so concurrent
        reconciliations agree on the same survivor. A store failure here is an
        incident, since the actor may be left double-booked until the next
        sweep.
        """

        try:
            held = list(
                Seat.objects.filter(current_holder=actor, is_available=False)
                .order_by(F("reserved_at").asc(nulls_first=True), "pk")
                .values_list("seat_number", flat=True)
            )
            if len(held) <= 1 or held[0] == seat_number:
                return
            Seat.objects.filter(
                seat_number=seat_number, is_available=False, current_holder=actor
            ).update(**_cleared_hold(self.clock()))
        except DatabaseError as exc:
            logger.exception(
                "Failed to reconcile claim of seat %s by user %s; "
                "actor may hold more than one seat",
                seat_number,
                actor.pk,
            )
            raise ReservationFatalError from exc

        logger.info(
            "Rolled back duplicate claim of seat %s by user %s (keeps %s)",
            seat_number,
            actor.pk,
            held[0],
        )
        raise DuplicateReservation(current_seat=held[0])


def sweep_expired_reservations(now: datetime | None = None) -> int:
    """Release every seat whose reservation window has elapsed.

    Set-based and idempotent: a second run right after the first finds nothing.

    Returns:
        Number of seats reclaimed.
    """

    now = now or timezone.now()
    count = Seat.objects.filter(is_available=False, reserved_until__lt=now).update(
        **_cleared_hold(now)
    )
    if count:
        logger.info("Reclaimed %s expired seat reservations", count)
    return count


def build_pool(pool: dict[str, dict[str, Any]]) -> list[Seat]:
    """Seats for every room in ``pool`` ({room: {"prefix": "W", "count": 36}})."""

    return [
        Seat(seat_number=f"{layout['prefix']}{i:02d}", room=room)
        for room, layout in pool.items()
        for i in range(1, int(layout["count"]) + 1)
    ]


@transaction.atomic
def initialize_pool(*, force: bool = False, pool: dict | None = None) -> int:
    """Create the seat pool.

    Without ``force`` this is a no-op once any seat exists. With ``force`` the
    existing pool is replaced in the same transaction; the unique constraint on
    ``seat_number`` aborts a concurrent initialization instead of duplicating.
    """

    if Seat.objects.exists():
        if not force:
            logger.info("Seat pool already initialized (%s seats)", Seat.objects.count())
            return 0
        Seat.objects.all().delete()

    seats = Seat.objects.bulk_create(build_pool(pool or settings.SEAT_POOL))
    logger.info("Seat pool initialized with %s seats", len(seats))
    return len(seats)
