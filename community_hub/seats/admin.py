from django.contrib import admin

from community_hub.seats import models


@admin.register(models.Seat)
class SeatAdmin(admin.ModelAdmin):
    list_display = [
        "seat_number",
        "room",
        "is_available",
        "current_holder",
        "reserved_until",
    ]
    search_fields = ["seat_number", "current_holder__username"]
    list_filter = ["room", "is_available"]
    readonly_fields = ["reserved_at", "created_at", "updated_at"]
