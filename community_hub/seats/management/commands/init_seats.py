from __future__ import annotations

from django.core.management.base import BaseCommand
from django.core.management.base import CommandParser

from community_hub.seats.services import initialize_pool


class Command(BaseCommand):
    help = "Create the seat pool (no-op when seats already exist unless --force)"

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--force",
            action="store_true",
            help="Delete every seat and recreate the pool, dropping reservations.",
        )

    def handle(self, *args, **options) -> None:
        created = initialize_pool(force=options["force"])
        if created:
            self.stdout.write(self.style.SUCCESS(f"Created {created} seats"))
        else:
            self.stdout.write("Seat pool already initialized; nothing to do")
