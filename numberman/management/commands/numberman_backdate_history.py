"""Management command to re-date the history of imported clients."""

from django.core.management.base import BaseCommand, CommandError

from numberman.exceptions import NumbermanError
from numberman.services import transitions


class Command(BaseCommand):
    help = "Set event_date on every history entry of the given clients (case-insensitive)"

    def add_arguments(self, parser):
        parser.add_argument("clients", nargs="+", help="Client names")
        parser.add_argument("--date", required=True, help="ISO date, e.g. 2023-01-01")

    def handle(self, *args, **options):
        try:
            results = transitions.backdate_client_history(options["clients"], options["date"])
        except NumbermanError as exc:
            raise CommandError(f"{exc.code}: {exc.message}") from exc

        for name, count in results.items():
            self.stdout.write(f"{name}: {count} history entries updated")
        self.stdout.write(
            self.style.SUCCESS(f"Updated {sum(results.values())} history entries.")
        )
