# finance/models.py

"""
Financial Management Models for the Firm

- FinancialSettings: singleton holding fixed monthly expenses and cash position
- CustomExpense: open-ended monthly expense lines
- CashTransaction: append-only cashbox ledger
- IncomeEntry: received income, used for weekly P&L

Fixed overhead per hour is never stored; see finance/utils.py.
"""

from django.db import models
from django.core.validators import MinValueValidator
from django.core.exceptions import ValidationError
from decimal import Decimal
import logging

from utils.models import BaseModel
from finance.utils import FIXED_EXPENSE_FIELDS

logger = logging.getLogger(__name__)


def money_field(verbose_name, help_text='', **kwargs):
    kwargs.setdefault('default', Decimal('0.00'))
    return models.DecimalField(
        verbose_name,
        max_digits=12,
        decimal_places=2,
        help_text=help_text,
        **kwargs
    )


# =============================================================================
# FINANCIAL SETTINGS (SINGLETON)
# =============================================================================

class FinancialSettings(BaseModel):
    """
    Fixed monthly expenses and cash position for the firm.
    Singleton pattern - only one instance, stored under the 'financials' key.
    """

    SINGLETON_KEY = 'financials'

    # Named monthly line items, in display order
    FIXED_EXPENSE_FIELDS = FIXED_EXPENSE_FIELDS

    id = models.CharField(
        primary_key=True,
        max_length=20,
        default=SINGLETON_KEY,
        editable=False
    )

    # -------------------------------------------------------------------------
    # FIXED MONTHLY EXPENSES
    # -------------------------------------------------------------------------

    monthly_lease = money_field("Monthly Lease", "Office lease / rent")
    payroll = money_field(
        "Payroll Subscription",
        "Payroll service subscription (distinct from labor cost)"
    )
    case_management = money_field("Case Management Software", "Clio case management")
    phone = money_field("Phone")
    wifi = money_field("Internet / Wi-Fi", "Frontier Wi-Fi")
    printer = money_field("Printer", "Kirbo printer lease")
    postage = money_field("Postage")
    efile = money_field("E-File Fees")
    supplies = money_field("Supplies")
    chargebacks = money_field("Chargebacks")
    staff_lunch = money_field("Staff Lunch")
    other_monthly_expenses = money_field("Other Monthly Expenses", "Catch-all")

    # -------------------------------------------------------------------------
    # CASH POSITION
    # -------------------------------------------------------------------------

    cash_on_hand = money_field("Cash on Hand")
    debt = money_field("Debt")
    cashbox_balance = money_field(
        "Cashbox Balance",
        "Physical cashbox; moved by cash transactions"
    )

    class Meta:
        verbose_name = "Financial Settings"
        verbose_name_plural = "Financial Settings"

    # -------------------------------------------------------------------------
    # SINGLETON PATTERN METHODS
    # -------------------------------------------------------------------------

    @classmethod
    def get_instance(cls):
        """Get or create the singleton instance of FinancialSettings."""
        instance, created = cls.objects.get_or_create(pk=cls.SINGLETON_KEY)
        if created:
            logger.info("Created FinancialSettings singleton")
        return instance

    @classmethod
    def load(cls):
        """Alternative method name for getting the instance."""
        return cls.get_instance()

    def save(self, *args, **kwargs):
        """Ensure only one instance exists (singleton pattern)"""
        self.pk = self.SINGLETON_KEY
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """Prevent deletion of the singleton instance"""
        logger.warning("Attempted to delete FinancialSettings singleton - operation blocked")

    def get_fixed_expenses(self):
        """Named line items as {field: amount}."""
        return {field: getattr(self, field) for field in self.FIXED_EXPENSE_FIELDS}

    def __str__(self):
        return "Financial Settings"


# =============================================================================
# CUSTOM EXPENSES
# =============================================================================

class CustomExpense(BaseModel):
    """A monthly expense that has no named field on FinancialSettings."""

    settings = models.ForeignKey(
        FinancialSettings,
        verbose_name="Financial Settings",
        on_delete=models.CASCADE,
        related_name='custom_expenses',
        default=FinancialSettings.SINGLETON_KEY
    )
    name = models.CharField("Expense Name", max_length=100)
    amount = money_field("Monthly Amount", validators=[MinValueValidator(Decimal('0.00'))])

    class Meta:
        verbose_name = "Custom Expense"
        verbose_name_plural = "Custom Expenses"
        ordering = ['created_at']

    def __str__(self):
        return f"{self.name}: {self.amount}"


# =============================================================================
# CASHBOX LEDGER
# =============================================================================

class CashTransaction(BaseModel):
    """
    Append-only cashbox ledger entry. Recording one moves the cashbox
    balance by +amount (in) or -amount (out).
    """

    DIRECTION_CHOICES = (
        ('in', 'Deposit'),
        ('out', 'Withdrawal'),
    )

    PAYMENT_METHOD_CHOICES = (
        ('cash', 'Cash'),
        ('check', 'Check'),
    )

    DEPOSIT_CATEGORIES = ('Initial', 'Client Payment', 'Other')
    WITHDRAWAL_CATEGORIES = (
        'Supplies', 'Stamps', 'CNB Bank', 'Bonus Pay', 'Borrow',
        'Barter', 'Lunch/Snacks', 'Office Repairs', 'Other',
    )

    CATEGORY_CHOICES = tuple(
        (category, category)
        for category in dict.fromkeys(DEPOSIT_CATEGORIES + WITHDRAWAL_CATEGORIES)
    )

    date = models.DateTimeField("Date", db_index=True)
    direction = models.CharField("Type", max_length=3, choices=DIRECTION_CHOICES, db_index=True)
    payment_method = models.CharField(
        "Payment Method",
        max_length=5,
        choices=PAYMENT_METHOD_CHOICES,
        default='cash'
    )
    category = models.CharField("Category", max_length=30, choices=CATEGORY_CHOICES)
    amount = models.DecimalField(
        "Amount",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    description = models.CharField("Description", max_length=255)
    counterparty = models.CharField(
        "From / To",
        max_length=150,
        blank=True,
        help_text="Who sent the cash/check or who received it"
    )
    performed_by = models.CharField("Performed By", max_length=100, default='Admin')

    class Meta:
        verbose_name = "Cash Transaction"
        verbose_name_plural = "Cash Transactions"
        ordering = ['-date']

    def __str__(self):
        sign = '+' if self.direction == 'in' else '-'
        return f"{self.date:%Y-%m-%d} {sign}{self.amount} {self.category}"

    @classmethod
    def categories_for(cls, direction):
        return cls.DEPOSIT_CATEGORIES if direction == 'in' else cls.WITHDRAWAL_CATEGORIES

    def clean(self):
        if self.category and self.direction and self.category not in self.categories_for(self.direction):
            raise ValidationError({
                'category': f"'{self.category}' is not a valid category for a {self.get_direction_display().lower()}"
            })

    def delete(self, *args, **kwargs):
        """Deleting a ledger entry would leave the cashbox balance out of step."""
        raise ValidationError("Cash transactions are append-only and cannot be deleted")

    @property
    def signed_amount(self):
        return self.amount if self.direction == 'in' else -self.amount


# =============================================================================
# INCOME
# =============================================================================

class IncomeEntry(BaseModel):
    """Income received; feeds the weekly P&L only."""

    CATEGORY_CHOICES = (
        ('Retainer', 'Retainer'),
        ('Monthly Fee', 'Monthly Fee'),
        ('Flat Fee', 'Flat Fee'),
        ('Consultation', 'Consultation'),
        ('Other', 'Other'),
    )

    METHOD_CHOICES = (
        ('Cash', 'Cash'),
        ('Check', 'Check'),
        ('Credit Card', 'Credit Card'),
        ('Zelle', 'Zelle'),
        ('Wire', 'Wire'),
    )

    date = models.DateField("Date", db_index=True)
    amount = models.DecimalField(
        "Amount",
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    client_name = models.CharField("Client Name", max_length=150)
    description = models.CharField("Description", max_length=255, blank=True)
    category = models.CharField("Category", max_length=20, choices=CATEGORY_CHOICES, default='Retainer')
    method = models.CharField("Method", max_length=20, choices=METHOD_CHOICES, default='Check')
    notes = models.TextField("Notes", blank=True)

    class Meta:
        verbose_name = "Income Entry"
        verbose_name_plural = "Income Entries"
        ordering = ['-date', '-created_at']

    def __str__(self):
        return f"{self.date} {self.client_name}: {self.amount}"

    def delete(self, *args, **kwargs):
        raise ValidationError("Income entries are append-only and cannot be deleted")
