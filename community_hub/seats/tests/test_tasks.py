import datetime as dt
from io import StringIO

import pytest
from django.core.management import call_command
from django.utils import timezone

from community_hub.seats.models import Seat
from community_hub.seats.tasks import sweep_expired_task
from tests.factories import create_seat


@pytest.mark.django_db
def test_sweep_task_reclaims_expired(user):
    create_seat("W01", holder=user, until=timezone.now() - dt.timedelta(minutes=1))

    result = sweep_expired_task.delay()

    assert result.get() == 1
    assert Seat.objects.get(seat_number="W01").is_available is True


def test_sweep_is_scheduled(settings):
    entry = settings.CELERY_BEAT_SCHEDULE["sweep-expired-seats"]
    assert entry["task"] == sweep_expired_task.name
    assert entry["schedule"] == settings.SEAT_SWEEP_INTERVAL_SECONDS


@pytest.mark.django_db
def test_init_seats_command(settings):
    settings.SEAT_POOL = {"white": {"prefix": "W", "count": 2}, "staff": {"prefix": "S", "count": 1}}
    out = StringIO()

    call_command("init_seats", stdout=out)
    call_command("init_seats", stdout=out)

    assert sorted(Seat.objects.values_list("seat_number", flat=True)) == ["S01", "W01", "W02"]
    assert "Created 3 seats" in out.getvalue()
    assert "nothing to do" in out.getvalue()


@pytest.mark.django_db
def test_sweep_seats_command(user):
    create_seat("W01", holder=user, until=timezone.now() - dt.timedelta(minutes=1))
    out = StringIO()

    call_command("sweep_seats", stdout=out)

    assert "Reclaimed 1 seats" in out.getvalue()
