# clients/apps.py

from django.apps import AppConfig


class ClientsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "clients"
    verbose_name = "Clients & Cases"

    def ready(self):
        """
        Import signal handlers when the app is ready.
        """
        import clients.signals  # noqa: F401
