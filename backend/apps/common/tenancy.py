# apps/common/tenancy.py
"""
Resolución de la academia (tenant) de cada request.

- Usuarios de academia: siempre su propia academia. Si el host resolvió otra
  academia distinta, se corta con 403 (tenant_mismatch).
- super_admin: la academia del host o la indicada por ?academia_id= / body;
  si no hay ninguna, ve todas (None).
"""
import logging

from apps.auth_core.utils import get_rol_actual
from apps.common.exceptions import NoEncontrado, Prohibido, Validacion

logger = logging.getLogger(__name__)


def _academia_id_pedida(request):
    valor = request.query_params.get("academia_id")
    if valor is None and isinstance(getattr(request, "data", None), dict):
        valor = request.data.get("academia_id")
    if valor in (None, ""):
        return None
    try:
        return int(valor)
    except (TypeError, ValueError):
        raise Validacion("academia_id inválido")


def academia_id_actual(request):
    """Id de la academia sobre la que opera el request (None = super_admin sin filtro)."""
    user = request.user
    host_academia = getattr(request, "academia_actual", None)

    if get_rol_actual(request) == "super_admin":
        pedida = _academia_id_pedida(request)
        if pedida is not None:
            return pedida
        return host_academia.id if host_academia else None

    if user.academia_id is None:
        raise Prohibido("El usuario no pertenece a ninguna academia")
    if host_academia is not None and host_academia.id != user.academia_id:
        logger.info(
            "[tenant][mismatch] user_id=%s user_academia=%s host_academia=%s path=%s",
            user.id, user.academia_id, host_academia.id, request.path,
        )
        raise Prohibido("tenant_mismatch")
    return user.academia_id


def exigir_academia(request):
    """Como academia_id_actual pero obligatorio y devolviendo la instancia."""
    from apps.academias_core.models import Academia

    academia_id = academia_id_actual(request)
    if academia_id is None:
        raise Validacion("academia_id es requerido")
    academia = Academia.objects.vigentes().filter(id=academia_id).first()
    if academia is None:
        raise NoEncontrado("Academia no encontrada")
    return academia


def filtrar_por_academia(qs, request, campo="academia_id"):
    academia_id = academia_id_actual(request)
    if academia_id is None:
        return qs
    return qs.filter(**{campo: academia_id})
