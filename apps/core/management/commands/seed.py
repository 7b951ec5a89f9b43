# apps/core/management/commands/seed.py

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.core.kv_store import kv_store, project_key, tasks_key
from apps.core.models import User
from apps.core.utils import now_iso

DEMO_PROJECT_ID = 'demo-project'

DEMO_USERS = [
    ('owner@teamboard.dev', 'Olivia Owner'),
    ('alice@teamboard.dev', 'Alice'),
    ('bob@teamboard.dev', 'Bob'),
]


class Command(BaseCommand):
    help = 'Cria usuários de demonstração e um projeto compartilhado com tarefas abertas'

    def add_arguments(self, parser):
        parser.add_argument(
            '--password',
            default='teamboard123',
            help='Senha dada a todos os usuários de demonstração',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('🌱 Criando dados de demonstração...')

        users = [self._get_or_create_user(email, name, options['password'])
                 for email, name in DEMO_USERS]
        owner = users[0]

        project = {
            'id': DEMO_PROJECT_ID,
            'name': 'Demo Project',
            'ownerId': owner.user_id,
            'ownerEmail': owner.email,
            'ownerName': owner.display_name,
            'members': [user.user_id for user in users],
            'memberDetails': [user.as_member() for user in users],
            'createdAt': now_iso(),
        }
        kv_store.set(project_key(DEMO_PROJECT_ID), project)

        kv_store.set(tasks_key(DEMO_PROJECT_ID), {
            'todo': [
                {'id': 'task-1', 'title': 'Write onboarding guide', 'assignedTo': users[1].user_id},
            ],
            'in-progress': [
                {'id': 'task-2', 'title': 'Set up CI', 'assignedTo': users[2].user_id},
            ],
            'done': [
                {'id': 'task-3', 'title': 'Create repository', 'assignedTo': owner.user_id},
            ],
        })

        self.stdout.write(
            self.style.SUCCESS(
                f'\n✅ Dados de demonstração prontos!\n'
                f'  👤 Usuários: {", ".join(email for email, _ in DEMO_USERS)}\n'
                f'  🔑 Senha: {options["password"]}\n'
                f'  📁 Projeto: {project["name"]} ({DEMO_PROJECT_ID})\n'
            )
        )

    def _get_or_create_user(self, email, name, password):
        user = User.objects.filter(email=email).first()
        if user is None:
            user = User.objects.create_user(username=email, email=email, password=password, name=name)
            self.stdout.write(f'  👤 Criado {email}')
        return user
