# clients/models.py

from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import logging

from utils.models import BaseModel

logger = logging.getLogger(__name__)


# Templates seeded by the firm_init_config command
DEFAULT_CASE_TYPES = (
    ('Habeas Corpus Art. 11.07', 75),
    ('Sentence Reduction/Time Cut', 25),
    ('Habeas Corpus 2254', 80),
    ('Parole Packet', 25),
    ('Appeal - Criminal', 40),
    ('Appeal - Civil', 55),
    ('Civil Lawsuit', 105),
    ('TDCJ Complaint', 15),
    ('Misdemeanor - Pretrial', 20),
    ('Felony - PreTrial', 50),
)


# =============================================================================
# CASE TYPE
# =============================================================================

class CaseType(BaseModel):
    """
    Intake template. Only pre-fills a new client's estimated hours;
    editing or deleting it does not touch existing clients.
    """

    name = models.CharField("Case Type", max_length=150)
    estimated_hours = models.DecimalField(
        "Estimated Hours",
        max_digits=7,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    class Meta:
        verbose_name = "Case Type"
        verbose_name_plural = "Case Types"
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.estimated_hours}h)"


# =============================================================================
# CLIENT
# =============================================================================

class Client(BaseModel):
    """
    A client file. `name` is the inmate the case is for; `sponsor_name`
    is the person paying.
    """

    STATUS_CHOICES = (
        ('active', 'Active'),
        ('risk', 'At Risk'),
        ('churned', 'Churned'),
    )

    BILLING_TYPE_CHOICES = (
        ('hourly', 'Hourly'),
        ('flat_fee', 'Flat Fee'),
    )

    name = models.CharField("Client Name", max_length=150, db_index=True)
    sponsor_name = models.CharField("Sponsor Name", max_length=150)
    case_type = models.CharField("Case Type", max_length=150, default='General')
    status = models.CharField(
        "Status",
        max_length=10,
        choices=STATUS_CHOICES,
        default='active',
        db_index=True
    )

    # -------------------------------------------------------------------------
    # BILLING
    # -------------------------------------------------------------------------

    billing_type = models.CharField(
        "Billing Type",
        max_length=10,
        choices=BILLING_TYPE_CHOICES,
        default='flat_fee'
    )
    retainer_fee = models.DecimalField(
        "Retainer Fee",
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )
    monthly_fee = models.DecimalField(
        "Monthly Fee",
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00')
    )

    # -------------------------------------------------------------------------
    # FLAT FEE TRACKING
    # -------------------------------------------------------------------------

    flat_fee_amount = models.DecimalField(
        "Flat Fee Amount",
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Total contracted price for the case"
    )
    estimated_hours = models.DecimalField(
        "Estimated Hours",
        max_digits=7,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Total hours budgeted for the case"
    )
    hours_logged = models.DecimalField(
        "Hours Logged",
        max_digits=9,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Running total from task logging; may exceed the estimate"
    )

    # -------------------------------------------------------------------------
    # COMMUNICATION
    # -------------------------------------------------------------------------

    last_communication = models.DateTimeField("Last Communication", null=True, blank=True)
    next_payment_due = models.DateField("Next Payment Due", null=True, blank=True)
    notes = models.TextField("Notes", blank=True)

    class Meta:
        verbose_name = "Client"
        verbose_name_plural = "Clients"
        ordering = ['name']

    def __str__(self):
        return f"{self.name} (sponsor: {self.sponsor_name})"

    @property
    def is_flat_fee(self):
        return self.billing_type == 'flat_fee'

    @property
    def progress_percentage(self):
        from clients.utils import calculate_progress_percentage
        return calculate_progress_percentage(self)

    @property
    def value_per_hour(self):
        from clients.utils import calculate_value_per_hour
        return calculate_value_per_hour(self)
