# apps/projects/apps.py

from django.apps import AppConfig


class ProjectsConfig(AppConfig):
    """Configuração do app Projects"""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.projects'
    verbose_name = 'Projetos & Equipe'
