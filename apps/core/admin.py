# apps/core/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.html import format_html

from .models import AuthToken, KeyValue, User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin do modelo User customizado"""

    list_display = ['email', 'name', 'is_active', 'is_staff', 'date_joined']
    list_filter = ['is_staff', 'is_active', 'date_joined']
    search_fields = ['email', 'name', 'username']
    ordering = ['-date_joined']

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Teamboard', {
            'fields': ('name',)
        }),
    )

    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Teamboard', {
            'fields': ('email', 'name')
        }),
    )


@admin.register(AuthToken)
class AuthTokenAdmin(admin.ModelAdmin):
    """Tokens bearer emitidos - somente leitura"""

    list_display = ['short_key', 'user', 'created_at', 'expires_at', 'status_badge']
    list_filter = ['created_at']
    search_fields = ['user__email']
    readonly_fields = ['key', 'user', 'created_at', 'expires_at']

    def short_key(self, obj):
        return f"{obj.key[:8]}..."

    short_key.short_description = 'Token'

    def status_badge(self, obj):
        """Mostra se o token ainda é válido"""
        color = '#EF4444' if obj.is_expired else '#10B981'
        label = 'Expirado' if obj.is_expired else 'Ativo'
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 3px 8px; border-radius: 4px; font-size: 11px;">{}</span>',
            color, label
        )

    status_badge.short_description = 'Situação'

    def has_add_permission(self, request):
        return False


@admin.register(KeyValue)
class KeyValueAdmin(admin.ModelAdmin):
    """Documentos brutos do armazenamento chave/valor"""

    list_display = ['key', 'kind', 'updated_at']
    search_fields = ['key']
    readonly_fields = ['updated_at']

    def kind(self, obj):
        """Tipo do registro - parte da chave antes do primeiro ':'"""
        return obj.key.split(':', 1)[0]

    kind.short_description = 'Tipo'
