# finance/admin.py

from django.contrib import admin
from .models import FinancialSettings, CustomExpense, CashTransaction, IncomeEntry


class CustomExpenseInline(admin.TabularInline):
    model = CustomExpense
    extra = 0
    fields = ['name', 'amount']


@admin.register(FinancialSettings)
class FinancialSettingsAdmin(admin.ModelAdmin):
    inlines = [CustomExpenseInline]
    readonly_fields = ['cashbox_balance', 'created_at', 'updated_at', 'updated_from_ip']

    fieldsets = (
        ('Fixed Monthly Expenses', {
            'fields': FinancialSettings.FIXED_EXPENSE_FIELDS
        }),
        ('Cash Position', {
            'fields': ('cash_on_hand', 'debt', 'cashbox_balance')
        }),
        ('Audit', {
            'fields': ('created_at', 'updated_at', 'updated_from_ip'),
            'classes': ('collapse',)
        }),
    )

    def has_add_permission(self, request):
        # Singleton
        return not FinancialSettings.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(CashTransaction)
class CashTransactionAdmin(admin.ModelAdmin):
    list_display = ['date', 'direction', 'payment_method', 'category', 'amount', 'counterparty', 'performed_by']
    list_filter = ['direction', 'payment_method', 'category']
    search_fields = ['description', 'counterparty', 'performed_by']
    date_hierarchy = 'date'

    def has_change_permission(self, request, obj=None):
        # Append-only ledger
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(IncomeEntry)
class IncomeEntryAdmin(admin.ModelAdmin):
    list_display = ['date', 'client_name', 'amount', 'category', 'method']
    list_filter = ['category', 'method']
    search_fields = ['client_name', 'description', 'notes']
    date_hierarchy = 'date'

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
