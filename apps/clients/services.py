# clients/services.py

"""
Client Services

Client workflows with database operations:
- Case intake with case-type pre-fill
- Client updates and communication tracking
- Case type template management and default seeding

For pure calculations without DB writes, see clients/utils.py
"""

from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime, parse_date
from django.core.exceptions import ValidationError
import logging

from clients.models import Client, CaseType, DEFAULT_CASE_TYPES
from clients.utils import validate_client_data, validate_case_type_data, default_next_payment_due
from utils.utils import to_decimal

logger = logging.getLogger(__name__)


# =============================================================================
# CLIENT SERVICE
# =============================================================================

class ClientService:

    MONEY_FIELDS = ('flat_fee_amount', 'estimated_hours', 'retainer_fee', 'monthly_fee')
    TEXT_FIELDS = ('name', 'sponsor_name', 'case_type', 'notes')

    @staticmethod
    @transaction.atomic
    def create_client(*, name, sponsor_name, case_type=None, billing_type='flat_fee',
                      flat_fee_amount=None, estimated_hours=None, monthly_fee=None,
                      retainer_fee=None, notes=''):
        """
        Open a new client file.

        Args:
            case_type: CaseType template (optional). Its estimated hours
                pre-fill the client's when none are given; its name becomes
                the client's case type label ("General" without one).

        Returns:
            Client
        """
        if case_type is not None and not to_decimal(estimated_hours):
            estimated_hours = case_type.estimated_hours

        billing_type = billing_type or 'flat_fee'
        validation = validate_client_data({
            'name': name,
            'sponsor_name': sponsor_name,
            'billing_type': billing_type,
            'flat_fee_amount': flat_fee_amount,
            'estimated_hours': estimated_hours,
            'monthly_fee': monthly_fee,
            'retainer_fee': retainer_fee,
        })
        if not validation['valid']:
            raise ValidationError(validation['errors'])

        client = Client.objects.create(
            name=name.strip(),
            sponsor_name=sponsor_name.strip(),
            case_type=case_type.name if case_type is not None else 'General',
            status='active',
            billing_type=billing_type,
            retainer_fee=to_decimal(retainer_fee),
            monthly_fee=to_decimal(monthly_fee),
            flat_fee_amount=to_decimal(flat_fee_amount),
            estimated_hours=to_decimal(estimated_hours),
            hours_logged=0,
            last_communication=timezone.now(),
            next_payment_due=default_next_payment_due(),
            notes=notes or '',
        )
        return client

    @staticmethod
    @transaction.atomic
    def update_client(client, data):
        """
        Partial update. hours_logged only moves through task logging.
        """
        for field in ClientService.TEXT_FIELDS:
            if field in data:
                setattr(client, field, (data[field] or '').strip())

        for field in ClientService.MONEY_FIELDS:
            if field in data:
                value = to_decimal(data[field], default=None)
                if value is None or value < 0:
                    raise ValidationError({field: "Enter a non-negative number."})
                setattr(client, field, value)

        if 'status' in data:
            if data['status'] not in dict(Client.STATUS_CHOICES):
                raise ValidationError({'status': f"Unknown status: {data['status']}"})
            client.status = data['status']

        if 'billing_type' in data:
            if data['billing_type'] not in dict(Client.BILLING_TYPE_CHOICES):
                raise ValidationError({'billing_type': f"Unknown billing type: {data['billing_type']}"})
            client.billing_type = data['billing_type']

        if 'last_communication' in data:
            value = data['last_communication']
            parsed = parse_datetime(value) if isinstance(value, str) else value
            if value and parsed is None:
                raise ValidationError({'last_communication': "Enter a valid date/time."})
            if parsed is not None and timezone.is_naive(parsed):
                parsed = timezone.make_aware(parsed)
            client.last_communication = parsed

        if 'next_payment_due' in data:
            value = data['next_payment_due']
            parsed = parse_date(value) if isinstance(value, str) else value
            if value and parsed is None:
                raise ValidationError({'next_payment_due': "Enter a valid date."})
            client.next_payment_due = parsed

        if not client.name or not client.sponsor_name:
            raise ValidationError("Please enter at least the Client Name and Sponsor Name.")

        client.save()
        logger.info(f"Client updated: {client.name}")
        return client

    @staticmethod
    def record_communication(client, when=None):
        """Mark a client update as sent."""
        client.last_communication = when or timezone.now()
        client.save(update_fields=['last_communication', 'updated_at', 'updated_from_ip'])
        return client


# =============================================================================
# CASE TYPE SERVICE
# =============================================================================

class CaseTypeService:

    @staticmethod
    def create_case_type(*, name, estimated_hours):
        validation = validate_case_type_data({'name': name, 'estimated_hours': estimated_hours})
        if not validation['valid']:
            raise ValidationError(validation['errors'])

        return CaseType.objects.create(name=name.strip(), estimated_hours=to_decimal(estimated_hours))

    @staticmethod
    def update_case_type(case_type, data):
        merged = {
            'name': data.get('name', case_type.name),
            'estimated_hours': data.get('estimated_hours', case_type.estimated_hours),
        }
        validation = validate_case_type_data(merged)
        if not validation['valid']:
            raise ValidationError(validation['errors'])

        case_type.name = merged['name'].strip()
        case_type.estimated_hours = to_decimal(merged['estimated_hours'])
        case_type.save()
        return case_type

    @staticmethod
    def delete_case_type(case_type):
        """Existing clients keep the label and hours they were opened with."""
        name = case_type.name
        case_type.delete()
        logger.info(f"Case type deleted: {name}")
        return name

    @staticmethod
    @transaction.atomic
    def seed_default_case_types():
        """
        Create any missing default templates.

        Returns:
            int: number of templates created
        """
        created_count = 0
        for name, estimated_hours in DEFAULT_CASE_TYPES:
            _, created = CaseType.objects.get_or_create(
                name=name,
                defaults={'estimated_hours': estimated_hours}
            )
            if created:
                created_count += 1

        if created_count:
            logger.info(f"Seeded {created_count} default case types")
        return created_count
