# apps/academias_core/views.py
import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from apps.academias_core.models import Academia, AcademiaDominio
from apps.academias_core.serializers import AcademiaEstadoSerializer, AcademiaSerializer
from apps.common.exceptions import cuerpo_error
from apps.common.permissions import EsSuperAdmin

logger = logging.getLogger(__name__)


class AcademiaViewSet(viewsets.ModelViewSet):
    """
    ABM de academias, exclusivo para super_admin.
    DELETE es lógico; los datos de la academia quedan intactos.
    """
    serializer_class = AcademiaSerializer
    permission_classes = [IsAuthenticated & EsSuperAdmin]

    def get_queryset(self):
        qs = Academia.objects.vigentes().prefetch_related("dominios")
        estado = self.request.query_params.get("estado")
        if estado:
            qs = qs.filter(estado=estado)
        return qs

    def perform_destroy(self, instance):
        instance.soft_delete()
        logger.info("[academias.eliminar][ok] academia=%s por=%s", instance.id, self.request.user.id)

    @action(detail=True, methods=["post"])
    def estado(self, request, pk=None):
        academia = self.get_object()
        ser = AcademiaEstadoSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        academia.estado = ser.validated_data["estado"]
        academia.save(update_fields=["estado", "actualizado_en"])
        logger.info("[academias.estado][ok] academia=%s estado=%s", academia.id, academia.estado)
        return Response(self.get_serializer(academia).data, status=status.HTTP_200_OK)


@api_view(["GET"])
@permission_classes([AllowAny])
def tenant_config(request):
    """
    Branding de la academia resuelta por hostname (lo usa el front antes del login).
    """
    academia = getattr(request, "academia_actual", None)
    hostname = request.META.get("HTTP_X_TENANT_HOST", request.META.get("HTTP_HOST", ""))

    if academia is None:
        if not hostname:
            return Response(cuerpo_error("No hostname provided"), status=400)
        dom = (
            AcademiaDominio.objects.select_related("academia")
            .filter(hostname=hostname.split(":")[0].lower(), activo=True, academia__deleted_at__isnull=True)
            .first()
        )
        academia = dom.academia if dom else None

    if academia is None:
        logger.info("[tenant_config] sin academia para hostname=%s", hostname)
        return Response({"hostname": hostname, "default": True, "nombre": "Academia"})

    return Response({
        "id": academia.id,
        "nombre": academia.nombre,
        "logo_url": academia.logo_url,
        "zona_horaria": academia.zona_horaria,
        "estado": academia.estado,
        "hostname": hostname,
    })
