# core/management/commands/firm_init_config.py

from django.core.management.base import BaseCommand

from core.services import FirmSetupService


class Command(BaseCommand):
    help = 'Create the financial settings singleton and seed the default case types'

    def handle(self, *args, **kwargs):
        self.stdout.write(self.style.WARNING('Initializing firm configuration...'))

        result = FirmSetupService.initialize()

        self.stdout.write(self.style.SUCCESS('✅ Firm configuration ready!'))
        self.stdout.write(self.style.SUCCESS(f"   - Financial settings: {result['financials'].pk}"))
        self.stdout.write(self.style.SUCCESS(f"   - Created {result['case_types_created']} default case types"))
