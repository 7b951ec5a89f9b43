# config/asgi.py

import os
from django.core.asgi import get_asgi_application

# Módulo de configurações padrão
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

# Os clientes consultam a API por polling; o ASGI serve apenas HTTP
application = get_asgi_application()
