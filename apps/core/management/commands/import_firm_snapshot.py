# core/management/commands/import_firm_snapshot.py

"""
Load a `law-firm-os-data` snapshot blob into the store.

USAGE EXAMPLES:
===============

# 1. Import an exported blob file
python manage.py import_firm_snapshot backup.json

# 2. Import whatever the local snapshot cache currently holds
python manage.py import_firm_snapshot --from-cache
"""

from django.core.management.base import BaseCommand, CommandError
import json
import logging

from core.cache import get_snapshot_cache
from core.services import SnapshotImportService
from utils.context import RequestContext

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Import a law-firm-os-data JSON snapshot into the record store'

    def add_arguments(self, parser):
        parser.add_argument(
            'path', nargs='?', default=None,
            help='Path to a JSON snapshot file'
        )
        parser.add_argument(
            '--from-cache', action='store_true',
            help='Import the blob held by the local snapshot cache'
        )

    def handle(self, *args, **options):
        path = options['path']

        if options['from_cache']:
            data = get_snapshot_cache().load()
            if data is None:
                raise CommandError('The local snapshot cache is empty.')
        elif path:
            try:
                with open(path, encoding='utf-8') as handle:
                    data = json.load(handle)
            except OSError as e:
                raise CommandError(f"Could not read {path}: {e}")
            except json.JSONDecodeError as e:
                raise CommandError(f"{path} is not valid JSON: {e}")
        else:
            raise CommandError('Give a snapshot file path or --from-cache.')

        if not isinstance(data, dict):
            raise CommandError('A snapshot must be a JSON object keyed by collection.')

        self.stdout.write(self.style.WARNING('Importing firm snapshot...'))
        # Imported records are stamped as coming from this machine
        with RequestContext(ip_address='127.0.0.1', request_path='import_firm_snapshot'):
            result = SnapshotImportService().import_snapshot(data)

        self.stdout.write(self.style.SUCCESS('✅ Snapshot import complete!'))
        for collection, count in result['imported'].items():
            if count:
                self.stdout.write(self.style.SUCCESS(f'   - {collection}: {count}'))
        for collection, count in result['skipped'].items():
            if count:
                self.stdout.write(self.style.ERROR(f'   - {collection}: skipped {count}'))
