# backend/academia_core/middleware.py
import logging
import time

from django.conf import settings

logger = logging.getLogger(__name__)


class LoggingMiddleware:
    """
    Loguea cada request con método, path, status y duración.
    Con DEBUG_LOG_REQUESTS=True además vuelca el payload (útil en dev, nunca en prod).
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        inicio = time.monotonic()
        if getattr(settings, "DEBUG_LOG_REQUESTS", False):
            logger.debug("[REQUEST] %s %s payload=%s", request.method, request.get_full_path(), self._payload(request))

        response = self.get_response(request)

        duracion_ms = int((time.monotonic() - inicio) * 1000)
        nivel = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            nivel,
            "[RESPONSE] %s %s status=%s ms=%s academia=%s",
            request.method,
            request.path,
            response.status_code,
            duracion_ms,
            getattr(getattr(request, "academia_actual", None), "id", None),
        )
        return response

    @staticmethod
    def _payload(request):
        try:
            return request.body.decode("utf-8") if request.body else ""
        except UnicodeDecodeError:
            return "<binario>"
