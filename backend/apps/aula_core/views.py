# apps/aula_core/views.py
import logging

from django.db.models import Count
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.auth_core.models import ROL_PROFESOR
from apps.auth_core.utils import get_rol_actual
from apps.aula_core.models import (
    Asistencia,
    Comentario,
    Escala,
    EvaluacionCancion,
    Insignia,
    InsigniaEstudiante,
    Rubrica,
    Tarea,
)
from apps.aula_core.serializers import (
    AsistenciaSerializer,
    ComentarioSerializer,
    EscalaSerializer,
    EvaluacionCancionSerializer,
    InsigniaEstudianteSerializer,
    InsigniaSerializer,
    RubricaSerializer,
    TareaSerializer,
)
from apps.aula_core.services import (
    clase_de_matricula,
    escalas_de_academia,
    matricula_visible,
    otorgar_insignia,
    rubricas_para_materia,
    upsert_registro,
)
from apps.common.exceptions import NoEncontrado, Validacion
from apps.common.permissions import EsDeSuAcademia, EsDirectorOProfesor, EsEncargado, LecturaProfesorEscrituraDirector
from apps.common.tenancy import academia_id_actual, exigir_academia, filtrar_por_academia
from apps.cursos_core.models import Cancion, Matricula
from apps.estudiantes_core.models import Estudiante
from apps.estudiantes_core.services import estudiante_del_encargado

logger = logging.getLogger(__name__)


class _RegistroClaseView(APIView):
    """
    Registro por (matrícula, fecha de período) con upsert.

    GET    ?fecha_periodo_id=&matricula_id=   → registros (al menos un filtro)
    PUT    {matricula_id, fecha_periodo_id, ...} → alta o actualización
    DELETE ?matricula_id=&fecha_periodo_id=[&...claves extra]
    """
    permission_classes = [IsAuthenticated & EsDirectorOProfesor]
    modelo = None
    serializer_class = None
    campos_valor = ()
    claves_extra = ()

    def _base_qs(self, request):
        qs = filtrar_por_academia(
            self.modelo.objects.filter(matricula__deleted_at__isnull=True),
            request,
            campo="matricula__academia_id",
        )
        if get_rol_actual(request) == ROL_PROFESOR:
            qs = qs.filter(matricula__curso__profesor=request.user)
        return qs

    def get(self, request):
        filtros = {}
        for param in ("fecha_periodo_id", "matricula_id") + self.claves_extra:
            valor = request.query_params.get(param)
            if valor:
                filtros[param] = valor
        if not filtros:
            raise Validacion("Indicar fecha_periodo_id o matricula_id")
        qs = self._base_qs(request).filter(**filtros).order_by("fecha_periodo__fecha", "id")
        return Response(self.serializer_class(qs, many=True).data)

    def validar_extra(self, request, matricula, datos):
        """Hook para validar/armar las claves extra del upsert."""
        return {}

    def put(self, request):
        ser = self.serializer_class(data=request.data)
        ser.is_valid(raise_exception=True)
        datos = ser.validated_data

        matricula = matricula_visible(request.user, get_rol_actual(request), academia_id_actual(request), datos["matricula_id"])
        fecha = clase_de_matricula(matricula, datos["fecha_periodo_id"])
        clave_extra = self.validar_extra(request, matricula, datos)

        valores = {campo: datos[campo] for campo in self.campos_valor if campo in datos}
        obj, creado = upsert_registro(self.modelo, matricula, fecha, valores, request.user, **clave_extra)
        return Response(
            self.serializer_class(obj).data,
            status=status.HTTP_201_CREATED if creado else status.HTTP_200_OK,
        )

    def delete(self, request):
        claves = ("matricula_id", "fecha_periodo_id") + self.claves_extra
        filtros = {c: request.query_params.get(c) for c in claves}
        faltantes = [c for c, v in filtros.items() if not v]
        if faltantes:
            raise Validacion("Faltan parámetros", faltantes)
        borrados, _ = self._base_qs(request).filter(**filtros).delete()
        if not borrados:
            raise NoEncontrado("Registro no encontrado")
        logger.info("[aula.%s][baja] %s", self.modelo.__name__.lower(), filtros)
        return Response(status=status.HTTP_204_NO_CONTENT)


class AsistenciaView(_RegistroClaseView):
    modelo = Asistencia
    serializer_class = AsistenciaSerializer
    campos_valor = ("estado", "notas")


class TareaView(_RegistroClaseView):
    modelo = Tarea
    serializer_class = TareaSerializer
    campos_valor = ("texto",)


class ComentarioView(_RegistroClaseView):
    modelo = Comentario
    serializer_class = ComentarioSerializer
    campos_valor = ("comentario",)


class EvaluacionCancionView(_RegistroClaseView):
    """Evaluación por (matrícula, canción, fecha, rúbrica); escala nula = sin calificar."""
    modelo = EvaluacionCancion
    serializer_class = EvaluacionCancionSerializer
    campos_valor = ("escala_id",)
    claves_extra = ("cancion_id", "rubrica_id")

    def validar_extra(self, request, matricula, datos):
        academia_id = matricula.academia_id
        if not Cancion.objects.vigentes().filter(id=datos["cancion_id"], academia_id=academia_id).exists():
            raise NoEncontrado("Canción no encontrada")
        if not Rubrica.objects.filter(id=datos["rubrica_id"], academia_id=academia_id).exists():
            raise NoEncontrado("Rúbrica no encontrada")
        escala_id = datos.get("escala_id")
        if escala_id and not Escala.objects.filter(id=escala_id, academia_id=academia_id).exists():
            raise NoEncontrado("Escala no encontrada")
        return {"cancion_id": datos["cancion_id"], "rubrica_id": datos["rubrica_id"]}


class DatosEvaluacionView(APIView):
    """Rúbricas (de la materia o por defecto) y escalas de la academia."""
    permission_classes = [IsAuthenticated & EsDirectorOProfesor]

    def get(self, request):
        academia = exigir_academia(request)
        rubricas = rubricas_para_materia(academia.id, request.query_params.get("materia_id"))
        return Response({
            "rubricas": RubricaSerializer(rubricas, many=True).data,
            "escalas": EscalaSerializer(escalas_de_academia(academia.id), many=True).data,
        })


# ------------------------------------------------------------------------------
# Insignias
# ------------------------------------------------------------------------------
class InsigniaViewSet(viewsets.ModelViewSet):
    serializer_class = InsigniaSerializer
    permission_classes = [LecturaProfesorEscrituraDirector, EsDeSuAcademia]
    pagination_class = None

    def get_queryset(self):
        return filtrar_por_academia(Insignia.objects.all(), self.request)

    def perform_create(self, serializer):
        serializer.save(academia=exigir_academia(self.request))


class InsigniaEstudianteView(APIView):
    """
    GET    ?estudiante_id=                  → insignias del estudiante
    POST   {estudiante_id, insignia_id}     → otorga (409 si ya la tiene)
    DELETE ?estudiante_id=&insignia_id=     → quita
    """
    permission_classes = [IsAuthenticated & EsDirectorOProfesor]

    def _estudiante(self, request, estudiante_id):
        qs = filtrar_por_academia(Estudiante.objects.vigentes(), request)
        estudiante = qs.filter(id=estudiante_id).first()
        if estudiante is None:
            raise NoEncontrado("Estudiante no encontrado")
        return estudiante

    def get(self, request):
        estudiante_id = request.query_params.get("estudiante_id")
        if not estudiante_id:
            raise Validacion("estudiante_id es requerido")
        estudiante = self._estudiante(request, estudiante_id)
        otorgadas = estudiante.insignias.select_related("insignia").order_by("-otorgada_en")
        return Response(InsigniaEstudianteSerializer(otorgadas, many=True).data)

    def post(self, request):
        ser = InsigniaEstudianteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        datos = ser.validated_data
        estudiante = self._estudiante(request, datos["estudiante_id"])
        insignia = Insignia.objects.filter(id=datos["insignia_id"], academia_id=estudiante.academia_id, activo=True).first()
        if insignia is None:
            raise NoEncontrado("Insignia no encontrada")

        matricula = None
        if datos.get("matricula_id"):
            matricula = matricula_visible(request.user, get_rol_actual(request), estudiante.academia_id, datos["matricula_id"])
            if matricula.estudiante_id != estudiante.id:
                raise Validacion("La matrícula no es del estudiante")

        otorgada = otorgar_insignia(estudiante, insignia, request.user, matricula=matricula, notas=datos.get("notas", ""))
        return Response(InsigniaEstudianteSerializer(otorgada).data, status=status.HTTP_201_CREATED)

    def delete(self, request):
        estudiante_id = request.query_params.get("estudiante_id")
        insignia_id = request.query_params.get("insignia_id")
        if not estudiante_id or not insignia_id:
            raise Validacion("estudiante_id e insignia_id son requeridos")
        estudiante = self._estudiante(request, estudiante_id)
        borrados, _ = InsigniaEstudiante.objects.filter(estudiante=estudiante, insignia_id=insignia_id).delete()
        if not borrados:
            raise NoEncontrado("El estudiante no tiene esta insignia")
        return Response(status=status.HTTP_204_NO_CONTENT)


# ------------------------------------------------------------------------------
# Portal del encargado: progreso de un curso
# ------------------------------------------------------------------------------
class HogarProgresoView(APIView):
    permission_classes = [IsAuthenticated & EsEncargado]

    def get(self, request, estudiante_id, matricula_id):
        academia_id_actual(request)
        estudiante = estudiante_del_encargado(request.user, estudiante_id)
        matricula = Matricula.objects.vigentes().filter(id=matricula_id, estudiante=estudiante).first()
        if matricula is None:
            raise NoEncontrado("Matrícula no encontrada")

        asistencia = dict(
            matricula.asistencias.order_by().values("estado").annotate(total=Count("id")).values_list("estado", "total")
        )
        return Response({
            "matricula_id": matricula.id,
            "asistencia": {estado: asistencia.get(estado, 0) for estado, _ in Asistencia.ESTADOS},
            "tareas": TareaSerializer(matricula.tareas.order_by("-fecha_periodo__fecha"), many=True).data,
            "comentarios": ComentarioSerializer(matricula.comentarios.order_by("-fecha_periodo__fecha"), many=True).data,
            "evaluaciones": EvaluacionCancionSerializer(matricula.evaluaciones.all(), many=True).data,
            "insignias": InsigniaEstudianteSerializer(
                estudiante.insignias.select_related("insignia"), many=True
            ).data,
        })
