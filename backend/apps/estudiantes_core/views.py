# apps/estudiantes_core/views.py
import logging

from django.contrib.auth import get_user_model
from django.db.models import Prefetch
from rest_framework import filters, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.auth_core.models import ROL_ENCARGADO
from apps.common.exceptions import NoEncontrado, Validacion
from apps.common.permissions import EsDirector, EsEncargado, LecturaProfesorEscrituraDirector
from apps.common.tenancy import academia_id_actual, exigir_academia, filtrar_por_academia
from apps.cursos_core.models import Matricula
from apps.estudiantes_core.models import EncargadoEstudiante, Estudiante
from apps.estudiantes_core.serializers import EstudianteSerializer, VinculoEncargadoSerializer
from apps.estudiantes_core.services import estudiante_del_encargado, estudiantes_del_encargado

logger = logging.getLogger(__name__)
User = get_user_model()


class EstudianteViewSet(viewsets.ModelViewSet):
    """
    ABM de estudiantes de la academia.
    - Profesores: solo lectura. Director/super_admin: escritura.
    - DELETE es lógico.
    """
    serializer_class = EstudianteSerializer
    permission_classes = [LecturaProfesorEscrituraDirector]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["nombre", "apellido", "email"]
    ordering_fields = ["apellido", "nombre", "creado_en"]

    def get_queryset(self):
        qs = Estudiante.objects.vigentes().prefetch_related(
            Prefetch("vinculos_encargados", queryset=EncargadoEstudiante.objects.select_related("encargado"))
        )
        qs = filtrar_por_academia(qs, self.request)
        estado = self.request.query_params.get("estado_inscripcion")
        if estado:
            qs = qs.filter(estado_inscripcion=estado)
        return qs

    def perform_create(self, serializer):
        academia = exigir_academia(self.request)
        estudiante = serializer.save(academia=academia)
        logger.info("[estudiantes.crear][ok] id=%s academia=%s", estudiante.id, academia.id)

    def perform_destroy(self, instance):
        instance.soft_delete()
        logger.info("[estudiantes.eliminar][ok] id=%s por=%s", instance.id, self.request.user.id)


class EncargadoEstudiantesView(APIView):
    """
    GET    /encargados/<id>/estudiantes/             → vínculos del encargado
    POST   /encargados/<id>/estudiantes/             → {estudiante_id, relacion}
    DELETE /encargados/<id>/estudiantes/?estudiante_id=
    """
    permission_classes = [IsAuthenticated & EsDirector]

    def _encargado(self, request, encargado_id):
        qs = filtrar_por_academia(User.objects.vigentes().filter(rol=ROL_ENCARGADO), request)
        encargado = qs.filter(id=encargado_id).first()
        if encargado is None:
            raise NoEncontrado("Encargado no encontrado")
        return encargado

    def get(self, request, encargado_id):
        encargado = self._encargado(request, encargado_id)
        vinculos = encargado.vinculos_estudiantes.select_related("estudiante").filter(estudiante__deleted_at__isnull=True)
        return Response(VinculoEncargadoSerializer(vinculos, many=True).data)

    def post(self, request, encargado_id):
        encargado = self._encargado(request, encargado_id)
        ser = VinculoEncargadoSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        estudiante = (
            Estudiante.objects.vigentes()
            .filter(id=ser.validated_data["estudiante_id"], academia_id=encargado.academia_id)
            .first()
        )
        if estudiante is None:
            raise NoEncontrado("Estudiante no encontrado")

        vinculo, creado = EncargadoEstudiante.objects.update_or_create(
            encargado=encargado,
            estudiante=estudiante,
            defaults={"relacion": ser.validated_data.get("relacion", "")},
        )
        logger.info("[encargados.vincular][%s] encargado=%s estudiante=%s", "nuevo" if creado else "actualizado", encargado.id, estudiante.id)
        return Response(
            VinculoEncargadoSerializer(vinculo).data,
            status=status.HTTP_201_CREATED if creado else status.HTTP_200_OK,
        )

    def delete(self, request, encargado_id):
        encargado = self._encargado(request, encargado_id)
        estudiante_id = request.query_params.get("estudiante_id")
        if not estudiante_id:
            raise Validacion("estudiante_id es requerido")
        borrados, _ = EncargadoEstudiante.objects.filter(encargado=encargado, estudiante_id=estudiante_id).delete()
        if not borrados:
            raise NoEncontrado("Vínculo no encontrado")
        return Response(status=status.HTTP_204_NO_CONTENT)


# ------------------------------------------------------------------------------
# Portal del encargado ("hogar")
# ------------------------------------------------------------------------------
class HogarEstudiantesView(APIView):
    permission_classes = [IsAuthenticated & EsEncargado]

    def get(self, request):
        academia_id_actual(request)  # valida tenant del host
        estudiantes = estudiantes_del_encargado(request.user)
        return Response([
            {
                "id": e.id,
                "nombre": e.nombre,
                "apellido": e.apellido,
                "estado_inscripcion": e.estado_inscripcion,
            }
            for e in estudiantes
        ])


class HogarCursosView(APIView):
    """Cursos (matrículas vigentes) de uno de los hijos del encargado."""
    permission_classes = [IsAuthenticated & EsEncargado]

    def get(self, request, estudiante_id):
        academia_id_actual(request)
        estudiante = estudiante_del_encargado(request.user, estudiante_id)
        matriculas = (
            Matricula.objects.vigentes()
            .filter(estudiante=estudiante)
            .select_related("curso__materia", "curso__periodo", "curso__profesor")
            .order_by("-curso__periodo__anio", "curso__materia__nombre")
        )
        return Response([
            {
                "matricula_id": m.id,
                "curso_id": m.curso_id,
                "materia": m.curso.materia.nombre,
                "periodo": str(m.curso.periodo),
                "profesor": m.curso.profesor.nombre_completo,
                "estado": m.estado,
            }
            for m in matriculas
        ])
