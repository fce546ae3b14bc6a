from django.core.management.base import BaseCommand

from community_hub.seats.services import sweep_expired_reservations


class Command(BaseCommand):
    help = "Release seats whose reservation has expired"

    def handle(self, *args, **options) -> None:
        count = sweep_expired_reservations()
        self.stdout.write(self.style.SUCCESS(f"Reclaimed {count} seats"))
