# intel/urls.py
from django.urls import path
from . import views

app_name = 'intel'

urlpatterns = [
    path('chat/', views.chat, name='chat'),
]
