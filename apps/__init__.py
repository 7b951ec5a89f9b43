# apps/__init__.py

"""
Teamboard - Aplicações Django

Este pacote contém todas as aplicações do sistema:
- core: usuários, tokens, armazenamento chave/valor, erros e permissões
- projects: projetos, membros da equipe e votação de exclusão
- board: tarefas kanban de cada projeto
- notifications: notificações de cada usuário
"""

__version__ = '0.1.0'
