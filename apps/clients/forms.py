# clients/forms.py

from django import forms
from django.core.exceptions import ValidationError
from decimal import Decimal
import logging

from .models import Client, CaseType

logger = logging.getLogger(__name__)


# =============================================================================
# CLIENT INTAKE FORM
# =============================================================================

class ClientIntakeForm(forms.Form):
    """New client file. Picking a case type pre-fills estimated hours."""

    name = forms.CharField(
        max_length=150,
        widget=forms.TextInput(attrs={
            'class': 'form-control',
            'placeholder': 'Client (inmate) name'
        })
    )
    sponsor_name = forms.CharField(
        max_length=150,
        widget=forms.TextInput(attrs={
            'class': 'form-control',
            'placeholder': 'Sponsor (payer) name'
        })
    )
    case_type = forms.ModelChoiceField(
        queryset=CaseType.objects.all(),
        required=False,
        widget=forms.Select(attrs={'class': 'form-select'})
    )
    billing_type = forms.ChoiceField(
        choices=Client.BILLING_TYPE_CHOICES,
        required=False,
        widget=forms.Select(attrs={'class': 'form-select'})
    )
    flat_fee_amount = forms.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0.00'),
        required=False,
        widget=forms.NumberInput(attrs={'class': 'form-control', 'step': '0.01'})
    )
    estimated_hours = forms.DecimalField(
        max_digits=7,
        decimal_places=2,
        min_value=Decimal('0.00'),
        required=False,
        widget=forms.NumberInput(attrs={'class': 'form-control', 'step': '0.5'})
    )
    monthly_fee = forms.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0.00'),
        required=False,
        widget=forms.NumberInput(attrs={'class': 'form-control', 'step': '0.01'})
    )
    retainer_fee = forms.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0.00'),
        required=False,
        widget=forms.NumberInput(attrs={'class': 'form-control', 'step': '0.01'})
    )
    notes = forms.CharField(
        required=False,
        widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 3})
    )

    def clean_billing_type(self):
        return self.cleaned_data.get('billing_type') or 'flat_fee'

    def clean(self):
        cleaned_data = super().clean()

        if cleaned_data.get('billing_type') == 'flat_fee':
            estimated_hours = cleaned_data.get('estimated_hours')
            if not estimated_hours and cleaned_data.get('case_type'):
                estimated_hours = cleaned_data['case_type'].estimated_hours
            if not cleaned_data.get('flat_fee_amount') or not estimated_hours:
                raise ValidationError(
                    "For flat fee cases, please enter the Flat Fee Amount and Estimated Hours to complete."
                )

        return cleaned_data


# =============================================================================
# CASE TYPE FORM
# =============================================================================

class CaseTypeForm(forms.ModelForm):
    """Form for case type templates"""

    class Meta:
        model = CaseType
        fields = ['name', 'estimated_hours']

        widgets = {
            'name': forms.TextInput(attrs={
                'class': 'form-control',
                'placeholder': 'e.g. Parole Packet'
            }),
            'estimated_hours': forms.NumberInput(attrs={
                'class': 'form-control',
                'step': '0.5',
                'min': 0
            }),
        }

    def clean_name(self):
        name = self.cleaned_data.get('name', '').strip()
        if not name:
            raise ValidationError("Case type name is required.")
        return name
