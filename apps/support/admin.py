# support/admin.py

from django.contrib import admin
from .models import SupportTicket


@admin.register(SupportTicket)
class SupportTicketAdmin(admin.ModelAdmin):
    list_display = ['ticket_number', 'subject', 'priority', 'status', 'submitted_by', 'created_at', 'resolved_at']
    list_filter = ['status', 'priority']
    search_fields = ['ticket_number', 'subject', 'description', 'submitted_by']
    readonly_fields = ['ticket_number', 'created_at', 'resolved_at']
