# finance/urls.py
from django.urls import path
from . import views

app_name = 'finance'

urlpatterns = [
    # =============================================================================
    # FINANCIAL SETTINGS
    # =============================================================================
    path('financials/', views.financials_detail, name='financials_detail'),
    path('financials/update/', views.financials_update, name='financials_update'),

    # =============================================================================
    # EXPENSES
    # =============================================================================
    path('expenses/add/', views.expense_add, name='expense_add'),
    path('expenses/<uuid:expense_id>/delete/', views.expense_delete, name='expense_delete'),

    # =============================================================================
    # CASHBOX
    # =============================================================================
    path('cashbox/', views.cashbox_list, name='cashbox_list'),
    path('cashbox/add/', views.cashbox_add, name='cashbox_add'),
    path('cashbox/reconcile/', views.cashbox_reconcile, name='cashbox_reconcile'),

    # =============================================================================
    # INCOME
    # =============================================================================
    path('income/', views.income_list, name='income_list'),
    path('income/add/', views.income_add, name='income_add'),

    # =============================================================================
    # METRICS
    # =============================================================================
    path('burn/', views.burn_metrics, name='burn_metrics'),
    path('pnl/', views.weekly_pnl, name='weekly_pnl'),
]
