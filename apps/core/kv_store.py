# apps/core/kv_store.py

"""
Armazenamento de documentos chave/valor

Fachada fina sobre o modelo KeyValue. Os valores são objetos Python
compatíveis com JSON (dicts e listas); as chaves seguem o formato
"<tipo>:<id>" montado pelas funções no fim deste módulo.
"""

import logging
from typing import Any, List, Optional

from django.db import DatabaseError

from .exceptions import InternalError
from .models import KeyValue

logger = logging.getLogger(__name__)


class KeyValueStore:
    """
    get / set / delete / get_by_prefix sobre a tabela kv_store

    Falhas do banco são registradas no log e relançadas como
    InternalError, para a API responder 500 sem vazar detalhes.
    """

    def get(self, key: str, for_update: bool = False) -> Optional[Any]:
        """
        Retorna o documento guardado em key, ou None

        for_update=True trava a linha até o fim da transação
        (SELECT ... FOR UPDATE). Deve ser chamado dentro de
        transaction.atomic().
        """
        queryset = KeyValue.objects.filter(key=key)
        if for_update:
            queryset = queryset.select_for_update()

        try:
            entry = queryset.first()
        except DatabaseError as exc:
            logger.error("❌ Erro ao ler a chave %s: %s", key, exc)
            raise InternalError() from exc

        return entry.value if entry else None

    def set(self, key: str, value: Any) -> None:
        try:
            KeyValue.objects.update_or_create(key=key, defaults={'value': value})
        except DatabaseError as exc:
            logger.error("❌ Erro ao gravar a chave %s: %s", key, exc)
            raise InternalError() from exc

    def delete(self, key: str) -> None:
        """Apagar uma chave inexistente não faz nada"""
        try:
            KeyValue.objects.filter(key=key).delete()
        except DatabaseError as exc:
            logger.error("❌ Erro ao apagar a chave %s: %s", key, exc)
            raise InternalError() from exc

    def get_by_prefix(self, prefix: str) -> List[Any]:
        """Retorna todos os documentos cuja chave começa com prefix, ordenados pela chave"""
        try:
            return list(
                KeyValue.objects.filter(key__startswith=prefix)
                .order_by('key')
                .values_list('value', flat=True)
            )
        except DatabaseError as exc:
            logger.error("❌ Erro ao buscar o prefixo %s: %s", prefix, exc)
            raise InternalError() from exc


# =================== FORMATO DAS CHAVES ===================

def project_key(project_id) -> str:
    return f'project:{project_id}'


def tasks_key(project_id) -> str:
    return f'tasks:{project_id}'


def deletion_vote_key(project_id) -> str:
    return f'deletion-vote:{project_id}'


def notification_key(notification_id) -> str:
    return f'notification:{notification_id}'


def invitation_key(user_id, invitation_id) -> str:
    return f'invitation:{user_id}:{invitation_id}'


def user_settings_key(user_id) -> str:
    return f'user-settings:{user_id}'


# Instância global do armazenamento (Singleton pattern)
kv_store = KeyValueStore()
