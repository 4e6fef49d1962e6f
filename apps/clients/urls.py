# clients/urls.py
from django.urls import path
from . import views

app_name = 'clients'

urlpatterns = [
    # Clients
    path('', views.client_list, name='client_list'),
    path('create/', views.client_create, name='client_create'),
    path('<uuid:client_id>/update/', views.client_update, name='client_update'),
    path('<uuid:client_id>/communication/', views.client_record_communication, name='client_record_communication'),

    # Case types
    path('case-types/', views.case_type_list, name='case_type_list'),
    path('case-types/create/', views.case_type_create, name='case_type_create'),
    path('case-types/<uuid:case_type_id>/update/', views.case_type_update, name='case_type_update'),
    path('case-types/<uuid:case_type_id>/delete/', views.case_type_delete, name='case_type_delete'),
]
