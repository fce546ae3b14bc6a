from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.utils import timezone
from rest_framework.test import APIClient

from community_hub.recruits.models import Recruit
from community_hub.recruits.services import create_recruit
from community_hub.seats.models import Seat
from community_hub.users.permissions import GROUP_ADMIN

if TYPE_CHECKING:
    from collections.abc import Iterable

User = get_user_model()


def create_user(
    username: str,
    *,
    privileged: bool = False,
    groups: Iterable[str] | None = None,
):
    user = User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password="TestPass123!",  # noqa: S106
    )
    names = list(groups or [])
    if privileged:
        names.append(GROUP_ADMIN)
    for name in names:
        group, _ = Group.objects.get_or_create(name=name)
        user.groups.add(group)
    return user


def api_client_for(user) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=user)
    return client


def create_seat(
    seat_number: str,
    room: str = Seat.Room.WHITE,
    *,
    holder=None,
    until=None,
    at=None,
):
    if holder is None:
        return Seat.objects.create(seat_number=seat_number, room=room)
    now = at or timezone.now()
    return Seat.objects.create(
        seat_number=seat_number,
        room=room,
        is_available=False,
        current_holder=holder,
        reserved_at=now,
        reserved_until=until or now + dt.timedelta(hours=1),
    )


def create_team(author, *, max_members: int = 4, **fields) -> Recruit:
    fields.setdefault("title", "Weekend CTF team")
    fields.setdefault("content", "Looking for web and pwn players.")
    fields.setdefault("category", Recruit.Category.CTF)
    fields.setdefault("deadline", timezone.now() + dt.timedelta(days=7))
    return create_recruit(author, max_members=max_members, **fields)


def add_member(recruit: Recruit, user) -> None:
    recruit.members.add(user)
    recruit.current_members += 1
    recruit.save(update_fields=["current_members", "updated_at"])
