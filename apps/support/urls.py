# support/urls.py
from django.urls import path
from . import views

app_name = 'support'

urlpatterns = [
    path('tickets/', views.ticket_list, name='ticket_list'),
    path('tickets/submit/', views.ticket_submit, name='ticket_submit'),
    path('tickets/<uuid:ticket_id>/resolve/', views.ticket_resolve, name='ticket_resolve'),
    path('tickets/<uuid:ticket_id>/status/', views.ticket_update_status, name='ticket_update_status'),
]
