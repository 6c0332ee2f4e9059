"""
Seed command: writes reproducible demo records into the table store.

Usage:
    python manage.py seed_tablestore               # 12 patients with child records
    python manage.py seed_tablestore --patients 30
    python manage.py seed_tablestore --flush       # delete every record first

The table store has no transactions: a failure midway leaves the records
created so far in place.
"""

from django.core.management.base import BaseCommand, CommandError

from ehr_dashboard.core.seeders import seed_tablestore
from ehr_dashboard.tablestore.client import get_client
from ehr_dashboard.tablestore.exceptions import TableStoreError


class Command(BaseCommand):
    help = "Seed the table store with demo patients and clinical records"

    def add_arguments(self, parser):
        parser.add_argument(
            "--patients",
            type=int,
            default=12,
            help="Number of patients to create (default: 12).",
        )
        parser.add_argument(
            "--flush",
            action="store_true",
            help="Delete every existing record of every resource before seeding.",
        )

    def handle(self, *args, **options):
        client = get_client()

        self.stdout.write("=" * 80)
        self.stdout.write(f"  EHR Seed - demo data for {client.base_url}")
        self.stdout.write("=" * 80)

        try:
            stats = seed_tablestore(client, patients=options["patients"], flush=options["flush"])
        except TableStoreError as e:
            raise CommandError(f"Seeding failed: {e}") from e

        self.stdout.write("\n" + "=" * 80)
        self.stdout.write(self.style.SUCCESS("  Seeding finished"))
        self.stdout.write("=" * 80)
        self._print_stats(stats)

    def _print_stats(self, stats):
        for key, value in sorted(stats.items()):
            self.stdout.write(f"  - {key}: {value}")
