# apps/board/urls.py

from django.urls import path
from . import views

app_name = 'board'

urlpatterns = [
    # Tarefas kanban
    path('projects/<str:project_id>/tasks', views.project_tasks, name='tasks'),

    # Avisos de conclusão
    path('tasks/<str:task_id>/complete', views.complete_task, name='complete_task'),
]
