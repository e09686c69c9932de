from django.apps import AppConfig
from django.db.models.signals import post_migrate


def _seed_admin(sender, **kwargs):
    from care.services.accounts import ensure_admin_user

    ensure_admin_user()


class CareConfig(AppConfig):
    name = "care"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self):
        post_migrate.connect(_seed_admin, sender=self, dispatch_uid="care.seed_admin")
