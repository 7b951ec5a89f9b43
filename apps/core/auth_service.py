# apps/core/auth_service.py

"""
Serviço de Autenticação - Encapsula toda lógica de contas da API

As views apenas extraem os dados da requisição e chamam este serviço;
cadastro, verificação de senha, emissão e validação de tokens, perfil
e preferências do usuário ficam aqui.
"""

import logging
import re
import secrets
from typing import Dict, Optional, Tuple

from django.conf import settings
from django.contrib.auth import authenticate
from django.core.cache import cache
from django.db import IntegrityError, transaction

from .exceptions import Conflict, InvalidRequest, Unauthorized
from .kv_store import kv_store, user_settings_key
from .models import AuthToken, User
from .utils import now_iso

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

DEFAULT_USER_SETTINGS = {'darkMode': False}


class AuthenticationService:
    """
    Serviço encapsulado para gerenciar autenticação

    As tentativas de login são contadas no cache do Django (Redis em
    produção) e a conta fica bloqueada por um tempo após muitas falhas.
    """

    def __init__(self):
        # Atributos privados - lidos das settings
        self._max_login_attempts = getattr(settings, 'TEAMBOARD_LOGIN_MAX_ATTEMPTS', 5)
        self._lockout_minutes = getattr(settings, 'TEAMBOARD_LOGIN_LOCKOUT_MINUTES', 15)
        self._token_ttl_hours = getattr(settings, 'TEAMBOARD_TOKEN_TTL_HOURS', 24 * 7)
        self._min_password_length = getattr(settings, 'TEAMBOARD_MIN_PASSWORD_LENGTH', 6)

    def register_user(self, email: str, password: str, name: str) -> User:
        """
        Cria uma nova conta de usuário

        Raises:
            InvalidRequest: campos faltando, email inválido ou senha curta
            Conflict: email já cadastrado
        """
        email = (email or '').strip().lower()
        name = (name or '').strip()

        self._validate_registration(email, password, name)

        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    username=email,
                    email=email,
                    password=password,
                    name=name,
                )
        except IntegrityError:
            raise Conflict('Email already registered')

        logger.info("👤 Usuário cadastrado: %s", email)
        return user

    def login(self, email: str, password: str) -> Tuple[User, AuthToken]:
        """
        Autentica por email/senha e emite um token bearer

        Raises:
            InvalidRequest: credenciais faltando
            Unauthorized: credenciais erradas ou conta bloqueada
        """
        email = (email or '').strip().lower()
        if not email or not password:
            raise InvalidRequest('Email and password are required')

        if self._account_locked(email):
            logger.warning("🔒 Login recusado para conta bloqueada: %s", email)
            raise Unauthorized('Too many failed attempts. Try again later.')

        user = authenticate(username=email, password=password)
        if user is None:
            self._register_failed_attempt(email)
            raise Unauthorized('Invalid email or password')

        self._reset_attempts(email)
        token = self._issue_token(user)
        return user, token

    def verify_token(self, token_key: Optional[str]) -> User:
        """
        Resolve um token bearer para o seu usuário

        Raises:
            Unauthorized: token ausente, desconhecido, expirado ou usuário inativo
        """
        if not token_key:
            raise Unauthorized('No access token provided')

        try:
            token = AuthToken.objects.select_related('user').get(key=token_key)
        except AuthToken.DoesNotExist:
            raise Unauthorized()

        if token.is_expired:
            token.delete()
            raise Unauthorized()

        if not token.user.is_active:
            raise Unauthorized()

        return token.user

    def logout(self, token_key: Optional[str]) -> None:
        """Revoga o token - tokens desconhecidos são ignorados"""
        if token_key:
            AuthToken.objects.filter(key=token_key).delete()

    # =================== PERFIL ===================

    @transaction.atomic
    def update_profile(self, user: User, name: Optional[str] = None,
                       email: Optional[str] = None) -> User:
        """
        Altera nome e/ou email do usuário

        Campos vazios mantêm o valor atual. Quando algo muda, os dados do
        membro são atualizados em todos os projetos e tarefas dele, na
        mesma transação.

        Raises:
            InvalidRequest: email inválido
            Conflict: email já usado por outra conta
        """
        from apps.projects.services import refresh_member_details

        name = (name or '').strip() or user.name
        email = (email or '').strip().lower() or user.email

        if not EMAIL_RE.match(email):
            raise InvalidRequest('Invalid email format')

        if email != user.email and User.objects.filter(email=email).exclude(pk=user.pk).exists():
            raise Conflict('Email already registered')

        if name == user.name and email == user.email:
            return user

        user.name = name
        user.email = email
        user.username = email
        user.save(update_fields=['name', 'email', 'username'])

        refresh_member_details(user)

        logger.info("✏️ Perfil atualizado: %s", user.user_id)
        return user

    def change_password(self, user: User, current_password: str, new_password: str) -> None:
        """
        Troca a senha após conferir a senha atual

        Raises:
            InvalidRequest: campos faltando, senha nova curta ou senha atual errada
        """
        if not current_password or not new_password:
            raise InvalidRequest('Current password and new password are required')

        if len(new_password) < self._min_password_length:
            raise InvalidRequest(
                f'New password must be at least {self._min_password_length} characters long'
            )

        if not user.check_password(current_password):
            logger.warning("⚠️ Senha atual incorreta na troca de senha: %s", user.user_id)
            raise InvalidRequest('Current password is incorrect')

        user.set_password(new_password)
        user.save(update_fields=['password'])
        logger.info("🔑 Senha alterada: %s", user.user_id)

    # =================== PREFERÊNCIAS ===================

    def get_user_settings(self, user: User) -> Dict:
        return kv_store.get(user_settings_key(user.user_id)) or dict(DEFAULT_USER_SETTINGS)

    def save_user_settings(self, user: User, dark_mode) -> Dict:
        """Grava as preferências; darkMode ausente vale False"""
        if dark_mode is None:
            dark_mode = False

        if not isinstance(dark_mode, bool):
            raise InvalidRequest('darkMode must be true or false')

        user_settings = {'darkMode': dark_mode, 'updatedAt': now_iso()}
        kv_store.set(user_settings_key(user.user_id), user_settings)
        return user_settings

    # =================== MÉTODOS PRIVADOS ===================

    def _validate_registration(self, email: str, password: str, name: str):
        if not email or not password or not name:
            raise InvalidRequest('Email, password, and name are required')

        if not EMAIL_RE.match(email):
            raise InvalidRequest('Invalid email format')

        if len(password) < self._min_password_length:
            raise InvalidRequest(
                f'Password must be at least {self._min_password_length} characters long'
            )

    def _issue_token(self, user: User) -> AuthToken:
        return AuthToken.objects.create(
            key=secrets.token_urlsafe(32),
            user=user,
            expires_at=AuthToken.expiry_from_now(self._token_ttl_hours),
        )

    def _attempts_cache_key(self, email: str) -> str:
        return f'login-attempts:{email}'

    def _account_locked(self, email: str) -> bool:
        attempts = cache.get(self._attempts_cache_key(email), 0)
        return attempts >= self._max_login_attempts

    def _register_failed_attempt(self, email: str):
        key = self._attempts_cache_key(email)
        attempts = cache.get(key, 0) + 1
        cache.set(key, attempts, timeout=self._lockout_minutes * 60)
        logger.warning("⚠️ Tentativa de login falhada (%s) para: %s", attempts, email)

    def _reset_attempts(self, email: str):
        cache.delete(self._attempts_cache_key(email))


# Instância global do serviço (Singleton pattern)
auth_service = AuthenticationService()
