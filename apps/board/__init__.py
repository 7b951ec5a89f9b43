# apps/board/__init__.py

"""
Board - Tarefas kanban de cada projeto

As tarefas de um projeto ficam em um único documento com três
colunas (todo, in-progress, done).
"""
