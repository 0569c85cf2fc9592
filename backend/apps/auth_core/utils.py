# backend/apps/auth_core/utils.py
"""
Helpers para extraer el rol del request.
El JWT lleva los claims `rol` y `academia_id`; la fila del usuario es la fuente de verdad
y un token emitido con otro rol deja de servir.
"""
import logging

import jwt
from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed

logger = logging.getLogger(__name__)


def get_rol_actual_del_jwt(request):
    """
    Extrae el claim `rol` del JWT del request.
    Retorna el rol o None si no hay Bearer token o no se puede decodificar.
    """
    auth_header = request.META.get("HTTP_AUTHORIZATION", "")
    if not auth_header.startswith("Bearer "):
        return None

    token = auth_header.split(" ", 1)[1]
    try:
        payload = jwt.decode(token, settings.SIMPLE_JWT.get("SIGNING_KEY", settings.SECRET_KEY), algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        logger.warning("[get_rol_actual_del_jwt] Token expirado")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning("[get_rol_actual_del_jwt] Token inválido: %s", e)
        return None
    return payload.get("rol")


def get_rol_actual(request):
    """
    Rol efectivo del usuario autenticado.
    Si el token fue emitido con otro rol (se cambió después del login) responde 401
    y el usuario tiene que volver a iniciar sesión.
    """
    cached = getattr(request, "_rol_actual", None)
    if cached:
        return cached

    user = getattr(request, "user", None)
    if not user or not user.is_authenticated:
        return None

    rol_token = get_rol_actual_del_jwt(request)
    if rol_token and rol_token != user.rol:
        logger.warning("[get_rol_actual] rol del token desactualizado user_id=%s token=%s actual=%s", user.id, rol_token, user.rol)
        raise AuthenticationFailed("El rol cambió, iniciá sesión nuevamente", code="rol_desactualizado")

    request._rol_actual = user.rol
    return user.rol
