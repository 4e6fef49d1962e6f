# finance/forms.py

from django import forms
from django.core.exceptions import ValidationError
from django.utils import timezone
from decimal import Decimal
import logging

from .models import CashTransaction, IncomeEntry

logger = logging.getLogger(__name__)


# =============================================================================
# EXPENSE FORM
# =============================================================================

class ExpenseForm(forms.Form):
    """Free-text monthly expense; routed to a named field when recognised"""

    name = forms.CharField(
        max_length=100,
        widget=forms.TextInput(attrs={
            'class': 'form-control',
            'placeholder': 'e.g. Rent, Insurance'
        })
    )
    amount = forms.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0.00'),
        widget=forms.NumberInput(attrs={
            'class': 'form-control',
            'placeholder': '0.00',
            'step': '0.01'
        })
    )

    def clean_name(self):
        name = self.cleaned_data.get('name', '').strip()
        if not name:
            raise ValidationError("Please enter an expense name.")
        return name


# =============================================================================
# CASH TRANSACTION FORM
# =============================================================================

class CashTransactionForm(forms.ModelForm):
    """Form for recording a cashbox deposit or withdrawal"""

    class Meta:
        model = CashTransaction
        fields = [
            'direction', 'payment_method', 'category', 'amount',
            'description', 'counterparty', 'performed_by'
        ]

        widgets = {
            'direction': forms.Select(attrs={'class': 'form-select'}),
            'payment_method': forms.Select(attrs={'class': 'form-select'}),
            'category': forms.Select(attrs={'class': 'form-select'}),
            'amount': forms.NumberInput(attrs={
                'class': 'form-control',
                'placeholder': '0.00',
                'step': '0.01'
            }),
            'description': forms.TextInput(attrs={
                'class': 'form-control',
                'placeholder': 'What was this for?'
            }),
            'counterparty': forms.TextInput(attrs={
                'class': 'form-control',
                'placeholder': 'Who sent / received it'
            }),
            'performed_by': forms.TextInput(attrs={'class': 'form-control'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['payment_method'].required = False
        self.fields['performed_by'].required = False

    def clean_payment_method(self):
        return self.cleaned_data.get('payment_method') or 'cash'

    def clean_performed_by(self):
        return (self.cleaned_data.get('performed_by') or '').strip() or 'Admin'

    def clean(self):
        cleaned_data = super().clean()
        direction = cleaned_data.get('direction')
        category = cleaned_data.get('category')

        if direction and category and category not in CashTransaction.categories_for(direction):
            self.add_error(
                'category',
                f"'{category}' is not a valid category for this transaction type."
            )

        return cleaned_data


# =============================================================================
# INCOME ENTRY FORM
# =============================================================================

class IncomeEntryForm(forms.ModelForm):
    """Form for recording received income"""

    class Meta:
        model = IncomeEntry
        fields = ['date', 'amount', 'client_name', 'description', 'category', 'method', 'notes']

        widgets = {
            'date': forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}),
            'amount': forms.NumberInput(attrs={
                'class': 'form-control',
                'placeholder': '0.00',
                'step': '0.01'
            }),
            'client_name': forms.TextInput(attrs={
                'class': 'form-control',
                'placeholder': 'Client name'
            }),
            'description': forms.TextInput(attrs={'class': 'form-control'}),
            'category': forms.Select(attrs={'class': 'form-select'}),
            'method': forms.Select(attrs={'class': 'form-select'}),
            'notes': forms.Textarea(attrs={'class': 'form-control', 'rows': 2}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['date'].required = False
        self.fields['category'].required = False
        self.fields['method'].required = False

    def clean_date(self):
        return self.cleaned_data.get('date') or timezone.localdate()

    def clean_category(self):
        return self.cleaned_data.get('category') or 'Retainer'

    def clean_method(self):
        return self.cleaned_data.get('method') or 'Check'

    def clean_client_name(self):
        client_name = self.cleaned_data.get('client_name', '').strip()
        if not client_name:
            raise ValidationError("Please enter the client name.")
        return client_name
