# apps/core/exceptions.py

"""
Taxonomia de erros da API

Os serviços levantam estas exceções; o ApiErrorMiddleware converte cada
uma em uma resposta JSON {"error": mensagem} com o status correspondente.
"""


class ApiError(Exception):
    """Classe base dos erros expostos aos clientes da API"""

    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequest(ApiError):
    status_code = 400
    default_message = 'Invalid request'


class Unauthorized(ApiError):
    status_code = 401
    default_message = 'Unauthorized'


class PermissionDenied(ApiError):
    status_code = 403
    default_message = 'Permission denied'


class NotFound(ApiError):
    status_code = 404
    default_message = 'Not found'


class NoVoteInProgress(NotFound):
    default_message = 'No deletion vote in progress'


class Conflict(ApiError):
    status_code = 409
    default_message = 'Conflict'


class InternalError(ApiError):
    pass
