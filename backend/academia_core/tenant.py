# academia_core/tenant.py
import logging

import idna
from django.conf import settings
from django.core.cache import cache

from apps.academias_core.models import Academia, AcademiaDominio

log = logging.getLogger(__name__)


class TenantMiddleware:
    """
    - Resuelve request.academia_actual a partir del Host (confiando en el reverse proxy).
    - Si el host no está mapeado, request.academia_actual=None: el tenant sale del usuario autenticado.
    - El control usuario ↔ academia se hace en apps.common.tenancy (la auth JWT corre en la vista,
      después de este middleware).
    - Cachea el mapeo hostname → academia_id para reducir hits a DB.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    @property
    def strict(self):
        return getattr(settings, "TENANT_STRICT_HOST", False)

    @property
    def trust_proxy(self):
        return getattr(settings, "TENANT_TRUST_PROXY_HEADERS", True)

    @property
    def cache_ttl(self):
        return getattr(settings, "TENANT_CACHE_TTL_SECONDS", 300)

    def _normalize_host(self, host: str) -> str:
        """
        Normaliza: lower, sin puerto, punycode → unicode, sin espacios.
        """
        if not host:
            return ""
        host = host.split(":")[0].strip().lower()
        try:
            host = idna.decode(idna.encode(host))
        except idna.IDNAError:
            # hosts como "localhost_dev" no son IDN válidos: se usan tal cual
            pass
        return host

    def _get_request_host(self, request) -> str:
        if self.trust_proxy:
            host = request.META.get("HTTP_X_TENANT_HOST") or request.META.get("HTTP_HOST")
            if host:
                return self._normalize_host(host)
        return self._normalize_host(request.get_host())

    def _resolve_academia(self, host: str):
        """
        Resuelve academia por host con cache.
        Devuelve instancia de Academia o None.
        """
        if not host:
            return None

        cache_key = f"tenant:host:{host}"
        cached = cache.get(cache_key)
        if cached is not None:
            # cached puede ser academia_id (int) o -1 para “no encontrado”
            if cached == -1:
                return None
            academia = Academia.objects.vigentes().filter(id=cached).first()
            if academia:
                return academia
            cache.delete(cache_key)

        dom = (
            AcademiaDominio.objects
            .select_related("academia")
            .filter(hostname=host, activo=True, academia__deleted_at__isnull=True)
            .first()
        )
        if dom is None:
            cache.set(cache_key, -1, self.cache_ttl)
            return None
        cache.set(cache_key, dom.academia_id, self.cache_ttl)
        return dom.academia

    def __call__(self, request):
        host = self._get_request_host(request)
        academia = self._resolve_academia(host)

        if academia is None and self.strict:
            log.info("[TENANT] host_desconocido host=%s path=%s", host, request.path)
        else:
            log.debug("[TENANT] host=%s academia=%s", host, getattr(academia, "id", None))

        request.academia_actual = academia
        return self.get_response(request)
