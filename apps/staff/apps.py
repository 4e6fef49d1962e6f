# staff/apps.py

from django.apps import AppConfig


class StaffConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "staff"
    verbose_name = "Staff & Task Logging"

    def ready(self):
        """
        Import signal handlers when the app is ready.
        """
        import staff.signals  # noqa: F401
