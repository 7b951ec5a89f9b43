# apps/core/utils.py

import json
import uuid
from typing import Dict

from django.utils import timezone

from .exceptions import InvalidRequest


def now_iso() -> str:
    """Horário atual em ISO-8601, o formato guardado nos documentos"""
    return timezone.now().isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


def parse_json_body(request) -> Dict:
    """
    Decodifica o corpo JSON da requisição
    Corpo vazio equivale a {}
    """
    if not request.body:
        return {}

    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise InvalidRequest('Malformed JSON body')

    if not isinstance(data, dict):
        raise InvalidRequest('Request body must be a JSON object')

    return data
