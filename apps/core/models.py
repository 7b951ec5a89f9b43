# apps/core/models.py

import uuid
from datetime import timedelta

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone


class User(AbstractUser):
    """
    Usuário customizado do Teamboard

    Identificado por UUID (guardado como string dentro dos documentos
    de projeto, tarefa e notificação); o login é feito pelo email.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=150, blank=True)

    class Meta:
        db_table = 'app_user'

    @property
    def user_id(self):
        """Identificador usado nos documentos chave/valor"""
        return str(self.id)

    @property
    def display_name(self):
        """Nome exibido aos outros membros - usa o início do email se vazio"""
        if self.name:
            return self.name
        return self.email.split('@')[0] if self.email else self.username

    def as_member(self):
        """Entrada guardada na lista memberDetails de um projeto"""
        return {
            'id': self.user_id,
            'email': self.email,
            'name': self.display_name,
        }

    def __str__(self):
        return f"{self.display_name} <{self.email}>"


class AuthToken(models.Model):
    """Token bearer emitido no login"""

    key = models.CharField(max_length=64, primary_key=True)
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='auth_tokens'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField()

    class Meta:
        db_table = 'auth_token'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user.email} - {self.key[:8]}..."

    @property
    def is_expired(self):
        return timezone.now() >= self.expires_at

    @classmethod
    def expiry_from_now(cls, hours):
        return timezone.now() + timedelta(hours=hours)


class KeyValue(models.Model):
    """
    Mapeamento durável chave -> documento JSON

    Cada registro da aplicação (projetos, tarefas, votações, notificações,
    convites, preferências) é uma linha aqui. O acesso passa sempre por
    apps.core.kv_store, nunca pelo modelo diretamente.
    """

    key = models.CharField(max_length=255, primary_key=True)
    value = models.JSONField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'kv_store'
        ordering = ['key']

    def __str__(self):
        return self.key
