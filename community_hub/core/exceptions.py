"""Typed error outcomes shared by the seat and recruit services.

Expected outcomes (not found, conflict, forbidden, validation) are plain DRF
exceptions so views can let them propagate to the default exception handler.
Only :class:`ReservationFatalError` represents an incident.
"""

from __future__ import annotations

from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.exceptions import NotFound
from rest_framework.exceptions import PermissionDenied
from rest_framework.exceptions import ValidationError

__all__ = [
    "Conflict",
    "NotFound",
    "PermissionDenied",
    "ReservationFatalError",
    "ValidationError",
]


class Conflict(APIException):
    """Resource unavailable, race lost, or duplicate request."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = _("The resource is not available.")
    default_code = "conflict"


class ReservationFatalError(APIException):
    """The store failed while compensating a claim.

    The actor may be left holding two seats until the next sweep or a manual
    correction.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = _("Reservation could not be reconciled.")
    default_code = "reservation_compensation_failed"
