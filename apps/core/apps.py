# core/apps.py

from django.apps import AppConfig
from django.conf import settings


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
    verbose_name = "Firm Command Center"

    def ready(self):
        """
        Hook the repository to model signals and keep the snapshot cache fresh.
        """
        from core.repository import get_repository
        from core.cache import get_snapshot_cache

        repository = get_repository()
        repository.connect()

        if getattr(settings, 'FIRM_SNAPSHOT_CACHE_ENABLED', True):
            get_snapshot_cache().start()
