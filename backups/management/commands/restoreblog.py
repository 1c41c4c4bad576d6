from django.core.management.base import BaseCommand, CommandError

from accounts.models import User
from backups.services import BackupError, read_backup, restore_backup


class Command(BaseCommand):
    help = "Replaces every blog record with the contents of a backup file."

    def add_arguments(self, parser):
        parser.add_argument("name", help="Backup file name, e.g. backup_2024-01-01T00-00-00-000Z.json")
        parser.add_argument(
            "-y",
            "--yes",
            action="store_true",
            default=None,
            help="Continue without asking confirmation.",
            dest="yes",
        )
        parser.add_argument(
            "-a",
            "--admin-email",
            default=None,
            help="Admin account that keeps its password through the restore.",
            dest="admin_email",
        )

    def handle(self, *args, **options):
        name = options["name"]
        answer = options["yes"]

        keep_admin = None
        if options["admin_email"]:
            keep_admin = User.objects.filter(email__iexact=options["admin_email"]).first()
            if keep_admin is None:
                raise CommandError(f"No account with email {options['admin_email']}")

        try:
            payload = read_backup(name)
        except BackupError as exc:
            raise CommandError(str(exc)) from exc

        if answer is None:
            self.stdout.write(f"This action will replace all blog data with the contents of {name}.")
            response = input("Are you sure you want to continue? [y/N]: ").lower().strip()
            answer = response == "y"

        if not answer:
            self.stdout.write("Aborted.")
            return

        try:
            result = restore_backup(payload, keep_admin=keep_admin)
        except BackupError as exc:
            raise CommandError(str(exc)) from exc

        counts = ", ".join(f"{section}={count}" for section, count in result["stats"].items())
        self.stdout.write(self.style.SUCCESS(f"Restored {name} ({counts})"))
