from django.utils.translation import gettext_lazy as _

from community_hub.core.exceptions import Conflict
from community_hub.core.exceptions import NotFound
from community_hub.core.exceptions import PermissionDenied


class SeatNotFound(NotFound):
    default_detail = _("Seat not found.")
    default_code = "seat_not_found"


class SeatTaken(Conflict):
    default_detail = _("Seat is already occupied.")
    default_code = "seat_taken"


class DuplicateReservation(Conflict):
    default_detail = _("You already have a seat reservation.")
    default_code = "duplicate_reservation"

    def __init__(self, current_seat: str | None = None):
        detail = {"detail": self.default_detail}
        if current_seat:
            detail["current_seat"] = current_seat
        super().__init__(detail, self.default_code)
        self.current_seat = current_seat


class RestrictedRoom(PermissionDenied):
    default_detail = _("Only administrators can reserve seats in the staff room.")
    default_code = "restricted_room"


class ReleaseForbidden(PermissionDenied):
    default_detail = _("Not authorized to release this seat or seat is not occupied.")
    default_code = "release_forbidden"
