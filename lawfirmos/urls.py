"""
URL configuration for the Law Firm Operating System.

Every app exposes JSON endpoints under its own prefix; the presentation
layer consumes them.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    # Django admin
    path('admin/', admin.site.urls),

    # Command center, snapshot, weekly report
    path('', include(('core.urls', 'core'), namespace='core')),

    # Staff & productivity - employees, task logs
    path('staff/', include(('staff.urls', 'staff'), namespace='staff')),

    # Clients - case intake, case type templates
    path('clients/', include(('clients.urls', 'clients'), namespace='clients')),

    # Finance - overhead, cashbox, income, weekly P&L
    path('finance/', include(('finance.urls', 'finance'), namespace='finance')),

    # Support tickets
    path('support/', include(('support.urls', 'support'), namespace='support')),

    # Firm intelligence - advisory chat
    path('intel/', include(('intel.urls', 'intel'), namespace='intel')),
]
