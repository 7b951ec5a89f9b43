# apps/projects/__init__.py

"""
Projects - Projetos, equipe e exclusão de projetos

Contém:
- Criação de projetos, membros e convites (services.py)
- Exclusão pedida pelo dono com votação da equipe (deletion.py)
"""
