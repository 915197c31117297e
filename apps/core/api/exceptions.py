import logging

from django.db import DatabaseError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from apps.core.exceptions import AuthorizationError, IcapError, StorageError

logger = logging.getLogger(__name__)


def icap_exception_handler(exc, context):
    """
    Maps domain errors to HTTP responses.
    DRF's own exceptions (auth, parsing, serializer validation) keep the default handling.
    """
    view = context.get('view')
    view_name = view.__class__.__name__ if view else 'unknown'

    if isinstance(exc, (DatabaseError, StorageError)):
        logger.error(f"Storage failure in {view_name}: {exc!r}", exc_info=exc)
        exc = StorageError()

    if isinstance(exc, IcapError):
        if isinstance(exc, AuthorizationError):
            request = context.get('request')
            user = getattr(request, 'user', None)
            logger.warning(f"Acesso negado em {view_name} para usuário {getattr(user, 'pk', None)}: {exc.message}")
        return Response(exc.as_payload(), status=exc.status_code)

    return exception_handler(exc, context)
