# apps/notifications/urls.py

from django.urls import path
from . import views

app_name = 'notifications'

urlpatterns = [
    path('notifications', views.list_notifications, name='list'),
    path('notifications/<str:notification_id>/read', views.mark_read, name='mark_read'),
]
