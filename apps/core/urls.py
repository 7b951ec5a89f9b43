# apps/core/urls.py

from django.urls import path
from . import views

app_name = 'core'

urlpatterns = [
    # === AUTENTICAÇÃO ===
    path('auth/register', views.register_view, name='register'),
    path('auth/login', views.login_view, name='login'),
    path('auth/verify', views.verify_view, name='verify'),
    path('auth/logout', views.logout_view, name='logout'),

    # === PERFIL ===
    path('auth/update-profile', views.update_profile_view, name='update_profile'),
    path('auth/change-password', views.change_password_view, name='change_password'),
    path('user/settings', views.user_settings_view, name='user_settings'),

    # === MONITORAMENTO ===
    path('health', views.health_check, name='health'),
]
