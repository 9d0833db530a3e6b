"""Management command to re-date the phones held by imported clients."""

from django.core.management.base import BaseCommand, CommandError

from numberman.exceptions import NumbermanError
from numberman.services import phones


class Command(BaseCommand):
    help = "Set updated_at on every phone currently held by the given clients"

    def add_arguments(self, parser):
        parser.add_argument("clients", nargs="+", help="Client names")
        parser.add_argument("--date", required=True, help="ISO date, e.g. 2023-01-01")

    def handle(self, *args, **options):
        try:
            results = phones.backdate_client_phones(options["clients"], options["date"])
        except NumbermanError as exc:
            raise CommandError(f"{exc.code}: {exc.message}") from exc

        for name, count in results.items():
            self.stdout.write(f"{name}: {count} phones updated")
        self.stdout.write(self.style.SUCCESS(f"Updated {sum(results.values())} phones."))
