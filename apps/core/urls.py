# core/urls.py
from django.urls import path
from . import views

app_name = 'core'

urlpatterns = [
     path('', views.dashboard, name='dashboard'),
     path('snapshot/', views.snapshot, name='snapshot'),
     path('report/weekly/', views.weekly_report, name='weekly_report'),
]
