# support/forms.py

from django import forms
from django.core.exceptions import ValidationError

from .models import SupportTicket


class SupportTicketForm(forms.ModelForm):
    """Form for submitting a support ticket"""

    class Meta:
        model = SupportTicket
        fields = ['subject', 'description', 'priority', 'submitted_by']

        widgets = {
            'subject': forms.TextInput(attrs={
                'class': 'form-control',
                'placeholder': 'Short summary'
            }),
            'description': forms.Textarea(attrs={
                'class': 'form-control',
                'rows': 4,
                'placeholder': 'What happened?'
            }),
            'priority': forms.Select(attrs={'class': 'form-select'}),
            'submitted_by': forms.TextInput(attrs={
                'class': 'form-control',
                'placeholder': 'Your name'
            }),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['priority'].required = False

    def clean_priority(self):
        return self.cleaned_data.get('priority') or 'medium'

    def clean_subject(self):
        subject = self.cleaned_data.get('subject', '').strip()
        if not subject:
            raise ValidationError("Subject is required.")
        return subject


class TicketResolutionForm(forms.Form):
    resolution = forms.CharField(
        widget=forms.Textarea(attrs={'class': 'form-control', 'rows': 3})
    )
