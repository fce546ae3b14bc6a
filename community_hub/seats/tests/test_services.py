import datetime as dt
from unittest import mock

import pytest
from django.db import DatabaseError
from django.utils import timezone

from community_hub.core.exceptions import ReservationFatalError
from community_hub.core.exceptions import ValidationError
from community_hub.seats.exceptions import DuplicateReservation
from community_hub.seats.exceptions import ReleaseForbidden
from community_hub.seats.exceptions import RestrictedRoom
from community_hub.seats.exceptions import SeatNotFound
from community_hub.seats.exceptions import SeatTaken
from community_hub.seats.models import Seat
from community_hub.seats.services import ReservationManager
from community_hub.seats.services import build_pool
from community_hub.seats.services import initialize_pool
from community_hub.seats.services import sweep_expired_reservations
from tests.factories import create_seat
from tests.factories import create_user

FIXED_NOW = dt.datetime(2026, 3, 2, 9, 0, tzinfo=dt.UTC)


@pytest.fixture
def manager():
    return ReservationManager(clock=lambda: FIXED_NOW, max_hours=8)


@pytest.mark.django_db
def test_claim_sets_holder_and_window(manager, user):
    create_seat("W01")

    seat = manager.claim(user, "W01", 3)

    assert seat.is_available is False
    assert seat.current_holder == user
    assert seat.reserved_at == FIXED_NOW
    assert seat.reserved_until == FIXED_NOW + dt.timedelta(hours=3)


@pytest.mark.django_db
def test_claim_unknown_seat_is_not_found(manager, user):
    with pytest.raises(SeatNotFound):
        manager.claim(user, "W99", 1)


@pytest.mark.django_db
@pytest.mark.parametrize("hours", [0, 9, -1, True, "2"])
def test_claim_rejects_out_of_range_hours(manager, user, hours):
    create_seat("W01")

    with pytest.raises(ValidationError):
        manager.claim(user, "W01", hours)

    assert Seat.objects.get(seat_number="W01").is_available is True


@pytest.mark.django_db
def test_claim_taken_seat_is_conflict(manager, user):
    other = create_user("other")
    create_seat("W01", holder=other)

    with pytest.raises(SeatTaken):
        manager.claim(user, "W01", 2)

    assert Seat.objects.get(seat_number="W01").current_holder == other


@pytest.mark.django_db
def test_second_claim_reports_current_seat(manager, user):
    create_seat("W01")
    create_seat("W02")
    manager.claim(user, "W01", 2)

    with pytest.raises(DuplicateReservation) as excinfo:
        manager.claim(user, "W02", 2)

    assert excinfo.value.current_seat == "W01"
    assert Seat.objects.get(seat_number="W02").is_available is True


@pytest.mark.django_db
def test_restricted_room_requires_privilege(manager, user, privileged_user):
    create_seat("S01", room=Seat.Room.STAFF)

    with pytest.raises(RestrictedRoom):
        manager.claim(user, "S01", 1)

    seat = manager.claim(privileged_user, "S01", 1, is_privileged=True)
    assert seat.current_holder == privileged_user


@pytest.mark.django_db
def test_claim_rolls_back_when_precheck_raced(manager, user):
    # Simulate the pre-check of a concurrent claim passing before either
    # claim landed: the actor already holds W01 by the time W02 is claimed.
    create_seat(
        "W01",
        holder=user,
        at=FIXED_NOW - dt.timedelta(minutes=5),
        until=FIXED_NOW + dt.timedelta(hours=1),
    )
    create_seat("W02")

    with (
        mock.patch.object(ReservationManager, "my_reservation", return_value=None),
        pytest.raises(DuplicateReservation),
    ):
        manager.claim(user, "W02", 2)

    w02 = Seat.objects.get(seat_number="W02")
    assert w02.is_available is True
    assert w02.current_holder is None
    assert w02.reserved_until is None
    assert Seat.objects.filter(current_holder=user, is_available=False).count() == 1


@pytest.mark.django_db
def test_failed_compensation_is_fatal(manager, user):
    create_seat(
        "W01",
        holder=user,
        at=FIXED_NOW - dt.timedelta(minutes=5),
        until=FIXED_NOW + dt.timedelta(hours=1),
    )
    create_seat("W02")

    with (
        mock.patch.object(ReservationManager, "my_reservation", return_value=None),
        mock.patch(
            "community_hub.seats.services._cleared_hold",
            side_effect=DatabaseError("connection lost"),
        ),
        pytest.raises(ReservationFatalError),
    ):
        manager.claim(user, "W02", 2)


@pytest.mark.django_db
def test_release_by_holder(manager, user):
    create_seat("W01")
    manager.claim(user, "W01", 2)

    seat = manager.release(user, "W01")

    assert seat.is_available is True
    assert seat.current_holder is None
    assert seat.reserved_at is None
    assert seat.reserved_until is None


@pytest.mark.django_db
def test_release_by_stranger_is_forbidden(manager, user):
    holder = create_user("holder")
    create_seat("W01", holder=holder)

    with pytest.raises(ReleaseForbidden):
        manager.release(user, "W01")

    assert Seat.objects.get(seat_number="W01").current_holder == holder


@pytest.mark.django_db
def test_privileged_release_of_any_seat(manager, privileged_user):
    holder = create_user("holder")
    create_seat("W01", holder=holder)

    seat = manager.release(privileged_user, "W01", is_privileged=True)

    assert seat.is_available is True


@pytest.mark.django_db
def test_release_of_free_seat_is_forbidden(manager, privileged_user):
    create_seat("W01")

    with pytest.raises(ReleaseForbidden):
        manager.release(privileged_user, "W01", is_privileged=True)


@pytest.mark.django_db
def test_release_unknown_seat_is_not_found(manager, user):
    with pytest.raises(SeatNotFound):
        manager.release(user, "W99")


@pytest.mark.django_db
def test_sweep_reclaims_only_expired_and_is_idempotent(user):
    now = timezone.now()
    other = create_user("other")
    create_seat("W01", holder=user, until=now - dt.timedelta(minutes=1))
    create_seat("W02", holder=other, until=now + dt.timedelta(hours=1))
    create_seat("W03")

    assert sweep_expired_reservations(now) == 1
    assert sweep_expired_reservations(now) == 0

    assert Seat.objects.get(seat_number="W01").is_available is True
    assert Seat.objects.get(seat_number="W02").current_holder == other


@pytest.mark.django_db
def test_expired_seat_can_be_claimed_after_sweep(manager, user):
    other = create_user("other")
    create_seat("W01", holder=other, until=FIXED_NOW - dt.timedelta(seconds=1))

    with pytest.raises(SeatTaken):
        manager.claim(user, "W01", 1)

    sweep_expired_reservations(FIXED_NOW)
    assert manager.claim(user, "W01", 1).current_holder == user


def test_build_pool_labels():
    seats = build_pool({"white": {"prefix": "W", "count": 3}, "staff": {"prefix": "S", "count": 1}})

    assert [s.seat_number for s in seats] == ["W01", "W02", "W03", "S01"]
    assert {s.room for s in seats} == {"white", "staff"}


@pytest.mark.django_db
def test_initialize_pool_is_noop_unless_forced(user):
    pool = {"white": {"prefix": "W", "count": 2}}

    assert initialize_pool(pool=pool) == 2
    assert initialize_pool(pool=pool) == 0

    Seat.objects.filter(seat_number="W01").update(
        is_available=False,
        current_holder=user,
        reserved_at=timezone.now(),
        reserved_until=timezone.now() + dt.timedelta(hours=1),
    )
    assert initialize_pool(pool=pool, force=True) == 2
    assert Seat.objects.filter(is_available=False).count() == 0
