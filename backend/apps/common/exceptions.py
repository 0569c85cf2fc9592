# apps/common/exceptions.py
"""
Errores de negocio y handler global de DRF.

Todas las respuestas de error salen con la misma forma:
    {"error": "<resumen>", "details": <opcional>}
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ErrorDeNegocio(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Solicitud inválida"

    def __init__(self, mensaje=None, detalles=None):
        self.mensaje = mensaje or self.default_detail
        self.detalles = detalles
        super().__init__(detail=self.mensaje)


class Validacion(ErrorDeNegocio):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Datos inválidos"


class Prohibido(ErrorDeNegocio):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "No autorizado"


class NoEncontrado(ErrorDeNegocio):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "No encontrado"


class Conflicto(ErrorDeNegocio):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "El recurso ya existe"


def cuerpo_error(mensaje, detalles=None):
    body = {"error": mensaje}
    if detalles not in (None, "", [], {}):
        body["details"] = detalles
    return body


def manejador_excepciones(exc, context):
    """
    EXCEPTION_HANDLER de DRF: normaliza todo a {error, details}.
    - ErrorDeNegocio: usa su mensaje/detalles tal cual.
    - ValidationError de serializers: "Datos inválidos" + errores por campo.
    - Resto de APIException: el detail pasa a ser el error.
    - Excepciones no controladas: 500 con el mensaje, logueadas con traceback.
    """
    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(exc.message_dict if hasattr(exc, "message_dict") else exc.messages)

    response = exception_handler(exc, context)
    view = context.get("view")

    if response is None:
        logger.exception("[errores][500] view=%s", view.__class__.__name__ if view else None)
        return Response(
            cuerpo_error("Ocurrió un error inesperado", str(exc)),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, ErrorDeNegocio):
        response.data = cuerpo_error(exc.mensaje, exc.detalles)
    elif isinstance(exc, ValidationError):
        response.data = cuerpo_error("Datos inválidos", response.data)
    elif isinstance(response.data, dict) and "detail" in response.data:
        response.data = cuerpo_error(str(response.data["detail"]))

    if response.status_code >= 500:
        logger.error("[errores][%s] view=%s error=%s", response.status_code, view.__class__.__name__ if view else None, exc)
    return response
