# clients/admin.py

from django.contrib import admin
from .models import Client, CaseType


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = [
        'name', 'sponsor_name', 'case_type', 'status', 'billing_type',
        'flat_fee_amount', 'estimated_hours', 'hours_logged', 'last_communication'
    ]
    list_filter = ['status', 'billing_type', 'case_type']
    search_fields = ['name', 'sponsor_name', 'notes']
    readonly_fields = ['hours_logged']

    fieldsets = (
        ('Client', {
            'fields': ('name', 'sponsor_name', 'case_type', 'status')
        }),
        ('Billing', {
            'fields': ('billing_type', 'retainer_fee', 'monthly_fee', 'flat_fee_amount', 'estimated_hours', 'hours_logged')
        }),
        ('Communication', {
            'fields': ('last_communication', 'next_payment_due', 'notes')
        }),
    )


@admin.register(CaseType)
class CaseTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'estimated_hours']
    search_fields = ['name']
