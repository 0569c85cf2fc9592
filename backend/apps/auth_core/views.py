# apps/auth_core/views.py
import logging

from django.contrib.auth import get_user_model
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from apps.auth_core.models import ROL_ENCARGADO, ROL_PROFESOR
from apps.auth_core.serializers import (
    CambiarEstadoSerializer,
    EncargadoSerializer,
    ProfesorSerializer,
    TokenConRolSerializer,
    UsuarioSerializer,
)
from apps.auth_core.utils import get_rol_actual
from apps.common.permissions import EsDirector, EsDirectorOProfesor
from apps.common.tenancy import exigir_academia, filtrar_por_academia

logger = logging.getLogger(__name__)
User = get_user_model()


class LoginView(TokenObtainPairView):
    """POST email/password → access/refresh con claims de rol y academia."""
    serializer_class = TokenConRolSerializer


class MiPerfilView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        user = request.user
        data = UsuarioSerializer(user).data
        if user.academia_id:
            academia = user.academia
            data["academia"] = {
                "id": academia.id,
                "nombre": academia.nombre,
                "logo_url": academia.logo_url,
                "estado": academia.estado,
            }
        return Response(data)

    def patch(self, request):
        ser = UsuarioSerializer(request.user, data=request.data, partial=True, context={"request": request})
        ser.is_valid(raise_exception=True)
        ser.save()
        return Response(ser.data)


class _PerfilAcademiaViewSet(viewsets.ModelViewSet):
    """
    CRUD de perfiles de una academia con un rol fijo.
    - Listado: director/profesor/super_admin de la academia.
    - Escritura: director o super_admin.
    - DELETE es lógico (deleted_at) y además bloquea el login.
    """
    rol = None
    filter_backends = [filters.OrderingFilter, filters.SearchFilter]
    ordering_fields = ["id", "apellido", "nombre", "email"]
    search_fields = ["nombre", "apellido", "email"]

    def get_permissions(self):
        if self.action in ("list", "retrieve"):
            return [IsAuthenticated(), EsDirectorOProfesor()]
        return [IsAuthenticated(), EsDirector()]

    def get_queryset(self):
        qs = User.objects.vigentes().filter(rol=self.rol).select_related("academia")
        qs = filtrar_por_academia(qs, self.request)
        estado = self.request.query_params.get("estado")
        if estado:
            qs = qs.filter(estado=estado)
        return qs.order_by("apellido", "nombre")

    def perform_create(self, serializer):
        academia = exigir_academia(self.request)
        perfil = serializer.save(academia=academia)
        logger.info("[perfiles.crear][ok] rol=%s id=%s academia=%s", self.rol, perfil.id, academia.id)

    def perform_destroy(self, instance):
        instance.soft_delete()
        logger.info("[perfiles.eliminar][ok] rol=%s id=%s por=%s", self.rol, instance.id, self.request.user.id)

    @action(detail=True, methods=["post"])
    def estado(self, request, pk=None):
        perfil = self.get_object()
        ser = CambiarEstadoSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        perfil.cambiar_estado(ser.validated_data["estado"])
        logger.info(
            "[perfiles.estado][ok] rol=%s id=%s estado=%s por=%s (%s)",
            self.rol, perfil.id, perfil.estado, request.user.id, get_rol_actual(request),
        )
        return Response(self.get_serializer(perfil).data, status=status.HTTP_200_OK)


class ProfesorViewSet(_PerfilAcademiaViewSet):
    rol = ROL_PROFESOR
    serializer_class = ProfesorSerializer


class EncargadoViewSet(_PerfilAcademiaViewSet):
    rol = ROL_ENCARGADO
    serializer_class = EncargadoSerializer
