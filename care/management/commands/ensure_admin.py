from django.core.management.base import BaseCommand

from care.services.accounts import ensure_admin_user


class Command(BaseCommand):
    help = "Ensure an administrator account exists (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--email", help="defaults to settings.ADMIN_EMAIL")
        parser.add_argument("--password", help="defaults to settings.ADMIN_PASSWORD")

    def handle(self, *args, **opts):
        user, created = ensure_admin_user(opts.get("email"), opts.get("password"))
        if created:
            self.stdout.write(self.style.SUCCESS(f"created: {user.email} (admin)"))
        else:
            self.stdout.write(self.style.WARNING(f"exists: {user.email} (admin), left unchanged"))
