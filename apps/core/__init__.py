# apps/core/__init__.py

"""
Core - Aplicação principal do Teamboard

Contém:
- Modelos User e AuthToken, serviço de autenticação por token
- Modelo KeyValue e o armazenamento de documentos chave/valor
- Erros da API e o middleware que os converte em JSON
- Permissões de dono e membro de projeto
- Comando de dados de demonstração
"""
