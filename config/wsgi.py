# config/wsgi.py

import os
from django.core.wsgi import get_wsgi_application

# Módulo de configurações padrão
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.production')

# Aplicação WSGI
application = get_wsgi_application()
