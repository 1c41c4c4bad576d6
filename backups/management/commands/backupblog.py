from django.core.management.base import BaseCommand

from backups.services import create_backup


class Command(BaseCommand):
    help = "Writes a JSON backup of every blog record to backup storage."

    def add_arguments(self, parser):
        parser.add_argument(
            "-d",
            "--description",
            default="",
            help="Free text stored inside the backup file.",
            dest="description",
        )

    def handle(self, *args, **options):
        result = create_backup(options["description"])
        counts = ", ".join(f"{section}={count}" for section, count in result["stats"].items())
        self.stdout.write(self.style.SUCCESS(f"Wrote {result['file_name']} ({counts})"))
