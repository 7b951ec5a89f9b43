# apps/notifications/__init__.py

"""
Notifications - Notificações de cada usuário

O resto do sistema só cria notificações; apenas o destinatário
altera alguma coisa nelas (a marcação de lida).
"""
