# apps/core/middleware.py

import logging

from django.http import JsonResponse

from .exceptions import ApiError

logger = logging.getLogger(__name__)


class ApiErrorMiddleware:
    """
    Converte exceções das views da API em respostas JSON de erro

    Subclasses de ApiError trazem o próprio status e mensagem.
    Qualquer outra exceção vai para o log com traceback e vira um 500
    genérico.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        # Processar request
        response = self.get_response(request)

        # Identificar o usuário autenticado na resposta
        if hasattr(request, 'api_user'):
            response['X-User-Id'] = request.api_user.user_id

        logger.debug("%s %s -> %s", request.method, request.path, response.status_code)
        return response

    def process_exception(self, request, exception):
        if isinstance(exception, ApiError):
            if exception.status_code >= 500:
                logger.error("❌ %s %s falhou: %s", request.method, request.path, exception.message)
            return JsonResponse({'error': exception.message}, status=exception.status_code)

        logger.exception("❌ Erro não tratado em %s %s", request.method, request.path)
        return JsonResponse({'error': 'Internal server error'}, status=500)
