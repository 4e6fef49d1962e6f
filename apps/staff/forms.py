# staff/forms.py

from django import forms
from django.core.exceptions import ValidationError
from decimal import Decimal
import logging

from .models import Employee, TaskLog
from clients.models import Client

logger = logging.getLogger(__name__)


# =============================================================================
# EMPLOYEE FORM
# =============================================================================

class EmployeeForm(forms.ModelForm):
    """Form for adding staff to the roster"""

    class Meta:
        model = Employee
        fields = ['name', 'role', 'hourly_cost', 'salary', 'daily_hours', 'daily_target']

        widgets = {
            'name': forms.TextInput(attrs={
                'class': 'form-control',
                'placeholder': 'Full name'
            }),
            'role': forms.TextInput(attrs={
                'class': 'form-control',
                'placeholder': 'e.g. Paralegal'
            }),
            'hourly_cost': forms.NumberInput(attrs={
                'class': 'form-control',
                'placeholder': '0.00',
                'step': '0.01'
            }),
            'salary': forms.NumberInput(attrs={
                'class': 'form-control',
                'placeholder': 'Annual salary',
                'step': '0.01'
            }),
            'daily_hours': forms.NumberInput(attrs={
                'class': 'form-control',
                'step': '0.5',
                'min': 0,
                'max': 24
            }),
            'daily_target': forms.NumberInput(attrs={
                'class': 'form-control',
                'placeholder': '0.00',
                'step': '0.01'
            }),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for field in ('hourly_cost', 'daily_hours', 'daily_target'):
            self.fields[field].required = False

    def clean_name(self):
        name = self.cleaned_data.get('name', '').strip()
        if not name:
            raise ValidationError("Please enter a name.")
        return name

    def clean_hourly_cost(self):
        return self.cleaned_data.get('hourly_cost') or Decimal('0.00')

    def clean_daily_hours(self):
        daily_hours = self.cleaned_data.get('daily_hours')
        if not daily_hours:
            return Decimal('8.00')
        if daily_hours > 24:
            raise ValidationError("Daily hours cannot exceed 24.")
        return daily_hours

    def clean_daily_target(self):
        # Left empty, the service derives it from the hourly rate
        return self.cleaned_data.get('daily_target')

    def clean(self):
        cleaned_data = super().clean()
        hourly_cost = cleaned_data.get('hourly_cost') or Decimal('0')
        salary = cleaned_data.get('salary') or Decimal('0')

        if hourly_cost <= 0 and salary <= 0:
            raise ValidationError("Please enter either an Hourly Cost or a Salary.")

        return cleaned_data


# =============================================================================
# TASK LOG FORM
# =============================================================================

class TaskLogForm(forms.Form):
    """Form for logging staff output"""

    employee = forms.ModelChoiceField(
        queryset=Employee.objects.filter(is_active=True),
        widget=forms.Select(attrs={'class': 'form-select'})
    )
    description = forms.CharField(
        max_length=500,
        widget=forms.TextInput(attrs={
            'class': 'form-control',
            'placeholder': 'What was done?'
        })
    )
    hours = forms.DecimalField(
        max_digits=7,
        decimal_places=2,
        min_value=Decimal('0.01'),
        widget=forms.NumberInput(attrs={'class': 'form-control', 'step': '0.25'})
    )
    date = forms.DateField(
        required=False,
        widget=forms.DateInput(attrs={'class': 'form-control', 'type': 'date'})
    )
    billing_type = forms.ChoiceField(
        choices=TaskLog.BILLING_TYPE_CHOICES,
        required=False,
        widget=forms.Select(attrs={'class': 'form-select'})
    )
    billable_rate = forms.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal('0.00'),
        required=False,
        widget=forms.NumberInput(attrs={'class': 'form-control', 'step': '0.01'})
    )
    client = forms.ModelChoiceField(
        queryset=Client.objects.filter(billing_type='flat_fee'),
        required=False,
        widget=forms.Select(attrs={'class': 'form-select'})
    )
    status = forms.ChoiceField(
        choices=TaskLog.STATUS_CHOICES,
        required=False,
        widget=forms.Select(attrs={'class': 'form-select'})
    )

    def clean_billing_type(self):
        return self.cleaned_data.get('billing_type') or 'billable'

    def clean_status(self):
        return self.cleaned_data.get('status') or 'completed'

    def clean(self):
        cleaned_data = super().clean()

        if cleaned_data.get('billing_type') == 'flat_fee' and not cleaned_data.get('client'):
            self.add_error('client', "Please select a case for flat fee work.")

        return cleaned_data
