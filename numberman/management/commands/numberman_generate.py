"""Management command to generate a block or a manual range of numbers."""

from django.core.management.base import BaseCommand, CommandError

from numberman.exceptions import NumbermanError
from numberman.services import generator


class Command(BaseCommand):
    help = "Create FREE phone numbers from a block prefix (03612812XX) or a range (A - B)"

    def add_arguments(self, parser):
        group = parser.add_mutually_exclusive_group(required=True)
        group.add_argument("--prefix", help="Block pattern, e.g. 03612812XX")
        group.add_argument("--range", dest="range_spec", help='Range, e.g. "0212561700 - 0212561799"')

    def handle(self, *args, **options):
        try:
            result = generator.generate(
                prefix=options["prefix"], range_spec=options["range_spec"]
            )
        except NumbermanError as exc:
            raise CommandError(f"{exc.code}: {exc.message}") from exc

        self.stdout.write(
            self.style.SUCCESS(
                f"Created {result.created_count} numbers "
                f"({result.first_number} - {result.last_number})."
            )
        )
