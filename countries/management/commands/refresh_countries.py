# countries/management/commands/refresh_countries.py
from django.core.management.base import BaseCommand, CommandError

from countries.exceptions import CountryServiceError
from countries.services import refresh_country_data


class Command(BaseCommand):
    help = "Fetches both external feeds and refreshes the cached countries, status and summary image."

    def handle(self, *args, **options):
        try:
            result = refresh_country_data()
        except CountryServiceError as e:
            raise CommandError(f"Refresh failed: {e}") from e

        self.stdout.write(self.style.SUCCESS(
            f"Refreshed {result['countries_processed']} countries "
            f"({result['countries_created']} created, {result['countries_updated']} updated). "
            f"Total: {result['total_countries']}."
        ))
        if not result['snapshot_generated']:
            self.stderr.write(self.style.WARNING("Summary image could not be generated; see the logs."))
