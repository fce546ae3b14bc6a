from django.conf import settings
from rest_framework import serializers

from community_hub.seats.models import Seat
from community_hub.seats.services import ALL_ROOMS
from community_hub.seats.services import MIN_HOURS


class SeatHolderSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    username = serializers.CharField(read_only=True)


class SeatSerializer(serializers.ModelSerializer):
    current_holder = SeatHolderSerializer(read_only=True, allow_null=True)

    class Meta:
        model = Seat
        fields = (
            "seat_number",
            "room",
            "is_available",
            "current_holder",
            "reserved_at",
            "reserved_until",
        )
        read_only_fields = fields


class SeatRoomFilterSerializer(serializers.Serializer):
    room = serializers.ChoiceField(
        choices=[ALL_ROOMS, *Seat.Room.values], required=False, default=ALL_ROOMS
    )


class SeatReserveSerializer(serializers.Serializer):
    hours = serializers.IntegerField(min_value=MIN_HOURS)

    def validate_hours(self, value: int) -> int:
        if value > settings.SEAT_MAX_HOURS:
            msg = f"Hours must be between {MIN_HOURS} and {settings.SEAT_MAX_HOURS}."
            raise serializers.ValidationError(msg)
        return value
