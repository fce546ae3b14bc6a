"""Seat booking endpoints.

The views only shape input and output; claim/release semantics and error
types live in ``community_hub.seats.services``.
"""

from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from rest_framework import permissions
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from community_hub.audit.utils import audit_request
from community_hub.seats.api.serializers import SeatReserveSerializer
from community_hub.seats.api.serializers import SeatRoomFilterSerializer
from community_hub.seats.api.serializers import SeatSerializer
from community_hub.seats.models import Seat
from community_hub.seats.services import ReservationManager
from community_hub.seats.services import initialize_pool
from community_hub.seats.services import sweep_expired_reservations
from community_hub.users.permissions import IsPrivileged
from community_hub.users.permissions import is_privileged


class SeatViewSet(viewsets.GenericViewSet):
    queryset = Seat.objects.select_related("current_holder")
    serializer_class = SeatSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_field = "seat_number"
    lookup_value_regex = r"[A-Za-z0-9_-]+"

    def get_permissions(self):
        if self.action == "list":
            return [permissions.AllowAny()]
        if self.action in {"cleanup_expired", "initialize"}:
            return [permissions.IsAuthenticated(), IsPrivileged()]
        return super().get_permissions()

    def get_manager(self) -> ReservationManager:
        return ReservationManager()

    @extend_schema(
        parameters=[
            OpenApiParameter("room", str, description="white | staff | all"),
        ]
    )
    def list(self, request):
        params = SeatRoomFilterSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        seats = self.get_manager().list_seats(params.validated_data["room"])
        return Response({"seats": SeatSerializer(seats, many=True).data})

    @extend_schema(request=SeatReserveSerializer)
    @action(detail=True, methods=["post"])
    def reserve(self, request, seat_number=None):
        payload = SeatReserveSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        hours = payload.validated_data["hours"]

        seat = self.get_manager().claim(
            request.user,
            seat_number,
            hours,
            is_privileged=is_privileged(request.user),
        )
        audit_request(
            request,
            "seat_reserved",
            message=f"Seat {seat.seat_number} reserved for {hours}h",
            model_name="Seat",
            record_id=seat.pk,
            after={"reserved_until": seat.reserved_until.isoformat()},
        )
        return Response(
            {"message": "Seat reserved successfully", "seat": SeatSerializer(seat).data}
        )

    @extend_schema(request=None)
    @action(detail=True, methods=["post"])
    def release(self, request, seat_number=None):
        seat = self.get_manager().release(
            request.user, seat_number, is_privileged=is_privileged(request.user)
        )
        audit_request(
            request,
            "seat_released",
            message=f"Seat {seat.seat_number} released",
            model_name="Seat",
            record_id=seat.pk,
        )
        return Response(
            {"message": "Seat released successfully", "seat": SeatSerializer(seat).data}
        )

    @action(detail=False, methods=["get"], url_path="my-reservation")
    def my_reservation(self, request):
        seat = self.get_manager().my_reservation(request.user)
        return Response({"seat": SeatSerializer(seat).data if seat else None})

    @extend_schema(request=None)
    @action(detail=False, methods=["post"], url_path="cleanup-expired")
    def cleanup_expired(self, request):
        count = sweep_expired_reservations()
        audit_request(
            request,
            "seats_swept",
            message=f"Manual sweep reclaimed {count} seats",
            model_name="Seat",
        )
        return Response({"message": "Expired reservations cleaned up", "count": count})

    @extend_schema(request=None)
    @action(detail=False, methods=["post"])
    def initialize(self, request):
        force = str(request.query_params.get("force", "")).lower() in {"1", "true"}
        count = initialize_pool(force=force)
        audit_request(
            request,
            "seats_initialized",
            message=f"Seat pool initialized ({count} created, force={force})",
            model_name="Seat",
        )
        return Response({"message": "Seats initialized", "count": count})
