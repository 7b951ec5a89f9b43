# config/urls.py

from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    # Administração
    path('admin/', admin.site.urls),

    # API JSON
    path('api/', include('apps.core.urls')),
    path('api/', include('apps.projects.urls')),
    path('api/', include('apps.board.urls')),
    path('api/', include('apps.notifications.urls')),
]

# Títulos do admin
admin.site.site_header = 'Teamboard Admin'
admin.site.site_title = 'Teamboard'
admin.site.index_title = 'Administração do Sistema'
