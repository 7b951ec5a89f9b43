# apps/notifications/service.py

import logging
from typing import Dict, List, Optional

from apps.core.exceptions import NotFound, PermissionDenied
from apps.core.kv_store import KeyValueStore, kv_store, notification_key
from apps.core.utils import new_id, now_iso

logger = logging.getLogger(__name__)

# Tipos de notificação
DELETION_VOTE = 'deletion_vote'
DELETION_REJECTED = 'deletion_rejected'
DELETION_CANCELLED = 'deletion_cancelled'
PROJECT_DELETED = 'project_deleted'
TASK_COMPLETED = 'task_completed'


class NotificationSink:
    """
    Notificações de cada usuário, guardadas como documentos notification:<id>
    """

    def __init__(self, store: Optional[KeyValueStore] = None):
        self.store = store or kv_store

    def create(self, user_id: str, type: str, message: str, project_id: str, **extra) -> Dict:
        """Adiciona uma notificação não lida para user_id"""
        notification = {
            'id': new_id(),
            'userId': user_id,
            'type': type,
            'message': message,
            'projectId': project_id,
            'read': False,
            'createdAt': now_iso(),
        }
        notification.update(extra)

        self.store.set(notification_key(notification['id']), notification)
        logger.debug("🔔 Notificação %s (%s) -> usuário %s", notification['id'], type, user_id)
        return notification

    def list_for_user(self, user_id: str) -> List[Dict]:
        """Notificações do usuário, mais recentes primeiro"""
        notifications = [
            n for n in self.store.get_by_prefix('notification:')
            if n.get('userId') == user_id
        ]
        notifications.sort(key=lambda n: n.get('createdAt', ''), reverse=True)
        return notifications

    def mark_read(self, notification_id: str, user_id: str) -> Dict:
        notification = self.store.get(notification_key(notification_id))
        if not notification:
            raise NotFound('Notification not found')

        if notification.get('userId') != user_id:
            raise PermissionDenied('Unauthorized')

        notification['read'] = True
        self.store.set(notification_key(notification_id), notification)
        return notification


# Instância global (Singleton pattern)
notification_sink = NotificationSink()
