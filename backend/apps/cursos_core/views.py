# apps/cursos_core/views.py
import logging

from django.db.models import Count, Q
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.auth_core.models import ROL_PROFESOR
from apps.auth_core.utils import get_rol_actual
from apps.common.exceptions import NoEncontrado, Validacion, cuerpo_error
from apps.common.permissions import EsDeSuAcademia, EsDirector, EsDirectorOProfesor, LecturaProfesorEscrituraDirector
from apps.common.tenancy import academia_id_actual, exigir_academia, filtrar_por_academia
from apps.cursos_core.filters import CursoFilter, HorarioFilter, MatriculaFilter
from apps.cursos_core.models import (
    Cancion,
    Curso,
    FechaPeriodo,
    Horario,
    Inscripcion,
    Materia,
    Matricula,
    MatriculaCancion,
    Periodo,
)
from apps.cursos_core.serializers import (
    CancionIdsSerializer,
    CancionSerializer,
    CursoActualizarSerializer,
    CursoCrearSerializer,
    CursoSerializer,
    FechaPeriodoSerializer,
    HorarioActualizarSerializer,
    HorarioCrearSerializer,
    HorarioSerializer,
    InscripcionLoteSerializer,
    InscripcionSerializer,
    MateriaSerializer,
    MatriculaCrearSerializer,
    MatriculaEstadoSerializer,
    MatriculaSerializer,
    PeriodoSerializer,
)
from apps.cursos_core.services.cursos import (
    actualizar_horario,
    crear_curso,
    crear_horarios,
    eliminar_curso,
    materia_de_academia,
    profesor_de_academia,
    resolver_periodo,
    validar_fecha_clase,
)
from apps.cursos_core.services.inscripciones import cancelar_inscripcion, inscribir_estudiantes
from apps.cursos_core.services.matriculas import crear_matricula, vincular_canciones

logger = logging.getLogger(__name__)


class _BajaLogicaMixin:
    """DELETE marca deleted_at en vez de borrar la fila."""

    def perform_destroy(self, instance):
        instance.soft_delete()
        logger.info("[%s.eliminar][ok] id=%s por=%s", instance.__class__.__name__.lower(), instance.id, self.request.user.id)


# ------------------------------------------------------------------------------
# Materias y canciones (catálogos por academia)
# ------------------------------------------------------------------------------
class MateriaViewSet(_BajaLogicaMixin, viewsets.ModelViewSet):
    serializer_class = MateriaSerializer
    permission_classes = [LecturaProfesorEscrituraDirector]
    filter_backends = [filters.SearchFilter]
    search_fields = ["nombre"]

    def get_queryset(self):
        return filtrar_por_academia(Materia.objects.vigentes(), self.request)

    def get_serializer_context(self):
        ctx = super().get_serializer_context()
        if self.action in ("create", "update", "partial_update"):
            ctx["academia_id"] = academia_id_actual(self.request)
        return ctx

    def perform_create(self, serializer):
        serializer.save(academia=exigir_academia(self.request))


class CancionViewSet(_BajaLogicaMixin, viewsets.ModelViewSet):
    serializer_class = CancionSerializer
    permission_classes = [LecturaProfesorEscrituraDirector]
    filter_backends = [filters.SearchFilter, DjangoFilterBackend]
    search_fields = ["titulo", "autor"]
    filterset_fields = ["dificultad"]

    def get_queryset(self):
        return filtrar_por_academia(Cancion.objects.vigentes(), self.request)

    def perform_create(self, serializer):
        serializer.save(academia=exigir_academia(self.request))


# ------------------------------------------------------------------------------
# Períodos y fechas de período
# ------------------------------------------------------------------------------
class PeriodoViewSet(_BajaLogicaMixin, viewsets.ModelViewSet):
    """
    POST de un período existente pero borrado lo restaura.
    GET/POST /periodos/{id}/fechas/ → fechas del período (alta en lote).
    """
    serializer_class = PeriodoSerializer
    permission_classes = [LecturaProfesorEscrituraDirector]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["anio", "periodo"]

    def get_queryset(self):
        return filtrar_por_academia(Periodo.objects.vigentes(), self.request)

    def create(self, request, *args, **kwargs):
        ser = self.get_serializer(data=request.data)
        ser.is_valid(raise_exception=True)
        academia = exigir_academia(request)
        vigente = Periodo.objects.vigentes().filter(
            academia=academia, anio=ser.validated_data["anio"], periodo=ser.validated_data["periodo"]
        ).exists()
        if vigente:
            raise Validacion("El período ya existe")
        periodo, _ = resolver_periodo(academia, ser.validated_data["anio"], ser.validated_data["periodo"])
        if ser.validated_data.get("descripcion"):
            periodo.descripcion = ser.validated_data["descripcion"]
            periodo.save(update_fields=["descripcion"])
        return Response(self.get_serializer(periodo).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get", "post"])
    def fechas(self, request, pk=None):
        periodo = self.get_object()

        if request.method == "GET":
            qs = periodo.fechas.vigentes().select_related("materia")
            for param, campo in (("tipo", "tipo"), ("materia_id", "materia_id"), ("profesor_id", "profesor_id")):
                valor = request.query_params.get(param)
                if valor:
                    qs = qs.filter(**{campo: valor})
            return Response(FechaPeriodoSerializer(qs, many=True).data)

        items = request.data if isinstance(request.data, list) else request.data.get("fechas", [request.data])
        ser = FechaPeriodoSerializer(data=items, many=True)
        ser.is_valid(raise_exception=True)
        for item in ser.validated_data:
            if item["tipo"] == "clase":
                validar_fecha_clase(periodo.academia_id, item.get("materia_id"), item.get("profesor_id"))
        creadas = [FechaPeriodo.objects.create(periodo=periodo, **item) for item in ser.validated_data]
        logger.info("[periodos.fechas][ok] periodo=%s creadas=%s", periodo.id, len(creadas))
        return Response(FechaPeriodoSerializer(creadas, many=True).data, status=status.HTTP_201_CREATED)


class FechaPeriodoViewSet(_BajaLogicaMixin,
                          mixins.RetrieveModelMixin,
                          mixins.UpdateModelMixin,
                          mixins.DestroyModelMixin,
                          viewsets.GenericViewSet):
    serializer_class = FechaPeriodoSerializer
    permission_classes = [LecturaProfesorEscrituraDirector]

    def get_queryset(self):
        return filtrar_por_academia(
            FechaPeriodo.objects.vigentes().select_related("periodo", "materia"), self.request, campo="periodo__academia_id"
        )

    def perform_update(self, serializer):
        datos = serializer.validated_data
        tipo = datos.get("tipo", serializer.instance.tipo)
        if tipo == "clase":
            validar_fecha_clase(
                serializer.instance.periodo.academia_id,
                datos.get("materia_id", serializer.instance.materia_id),
                datos.get("profesor_id", serializer.instance.profesor_id),
            )
        serializer.save()


# ------------------------------------------------------------------------------
# Cursos (profesor, materia, período)
# ------------------------------------------------------------------------------
class CursoViewSet(viewsets.ModelViewSet):
    """
    - Listado con conteo de sesiones y turnos; el profesor solo ve los suyos.
    - Alta: período + curso + fechas de clase + horarios en una sola transacción.
    - PATCH: solo mensualidad. DELETE: baja lógica del curso, sus horarios y fechas.
    """
    filter_backends = [DjangoFilterBackend]
    filterset_class = CursoFilter
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_permissions(self):
        if self.action in ("list", "retrieve", "sesiones"):
            return [IsAuthenticated(), EsDirectorOProfesor(), EsDeSuAcademia()]
        return [IsAuthenticated(), EsDirector(), EsDeSuAcademia()]

    def get_serializer_class(self):
        if self.action == "create":
            return CursoCrearSerializer
        if self.action == "partial_update":
            return CursoActualizarSerializer
        return CursoSerializer

    def get_queryset(self):
        qs = (
            Curso.objects.vigentes()
            .select_related("materia", "periodo", "profesor")
            .annotate(
                turnos_count=Count("horarios", filter=Q(horarios__deleted_at__isnull=True), distinct=True),
                estudiantes_count=Count("matriculas", filter=Q(matriculas__deleted_at__isnull=True), distinct=True),
            )
            .order_by("-periodo__anio", "periodo__periodo", "materia__nombre")
        )
        qs = filtrar_por_academia(qs, self.request)
        if get_rol_actual(self.request) == ROL_PROFESOR:
            qs = qs.filter(profesor=self.request.user)
        return qs

    def _con_sesiones(self, cursos):
        # las fechas de clase no cuelgan del curso por FK: se cuentan aparte
        for curso in cursos:
            curso.sesiones_count = curso.fechas_clase().count()
        return cursos

    def list(self, request, *args, **kwargs):
        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(CursoSerializer(self._con_sesiones(page), many=True).data)
        return Response(CursoSerializer(self._con_sesiones(list(qs)), many=True).data)

    def retrieve(self, request, *args, **kwargs):
        curso = self._con_sesiones([self.get_object()])[0]
        return Response(CursoSerializer(curso).data)

    def create(self, request, *args, **kwargs):
        ser = CursoCrearSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        academia = exigir_academia(request)
        curso = crear_curso(academia, **ser.validated_data)
        curso = self._con_sesiones([self.get_queryset().get(pk=curso.pk)])[0]
        return Response(CursoSerializer(curso).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        curso = self.get_object()
        ser = CursoActualizarSerializer(curso, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        ser.save()
        logger.info("[cursos.actualizar][ok] curso=%s mensualidad=%s", curso.id, curso.mensualidad)
        return self.retrieve(request, *args, **kwargs)

    def perform_destroy(self, instance):
        eliminar_curso(instance)

    @action(detail=True, methods=["get"])
    def sesiones(self, request, pk=None):
        curso = self.get_object()
        return Response(FechaPeriodoSerializer(curso.fechas_clase(), many=True).data)


# ------------------------------------------------------------------------------
# Horarios e inscripciones
# ------------------------------------------------------------------------------
class HorarioViewSet(_BajaLogicaMixin, viewsets.ModelViewSet):
    """
    POST /horarios/ → 201 todo creado, 207 con advertencias, 400 si ninguna franja entró.
    GET/POST /horarios/{id}/inscripciones/ → inscriptos activos / inscripción en lote.
    """
    filter_backends = [DjangoFilterBackend]
    filterset_class = HorarioFilter
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_permissions(self):
        if self.action in ("list", "retrieve") or (self.action == "inscripciones" and self.request.method == "GET"):
            return [IsAuthenticated(), EsDirectorOProfesor(), EsDeSuAcademia()]
        return [IsAuthenticated(), EsDirector(), EsDeSuAcademia()]

    def get_serializer_class(self):
        if self.action == "create":
            return HorarioCrearSerializer
        if self.action == "partial_update":
            return HorarioActualizarSerializer
        return HorarioSerializer

    def get_queryset(self):
        qs = (
            Horario.objects.vigentes()
            .select_related("profesor")
            .annotate(inscriptos=Count("inscripciones", filter=Q(inscripciones__estado="activa")))
        )
        qs = filtrar_por_academia(qs, self.request)
        if get_rol_actual(self.request) == ROL_PROFESOR:
            qs = qs.filter(profesor=self.request.user)
        return qs.order_by("dia_semana", "hora_inicio")

    def create(self, request, *args, **kwargs):
        ser = HorarioCrearSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        datos = ser.validated_data
        academia = exigir_academia(request)

        profesor = profesor_de_academia(academia.id, datos["profesor_id"])
        materia = materia_de_academia(academia.id, datos["materia_id"]) if datos.get("materia_id") else None
        periodo = None
        if datos.get("periodo_id"):
            periodo = Periodo.objects.vigentes().filter(id=datos["periodo_id"], academia=academia).first()
            if periodo is None:
                raise NoEncontrado("Período no encontrado")
        curso = None
        if datos.get("curso_id"):
            curso = Curso.objects.vigentes().filter(id=datos["curso_id"], academia=academia).first()
            if curso is None:
                raise NoEncontrado("Curso no encontrado")

        creados, advertencias = crear_horarios(
            academia, profesor, datos["franjas"],
            nombre=datos["nombre"], materia=materia, periodo=periodo, curso=curso,
            aula=datos.get("aula", ""), capacidad=datos.get("capacidad"),
        )
        if not creados:
            return Response(
                cuerpo_error("No se pudo crear ningún horario", advertencias),
                status=status.HTTP_400_BAD_REQUEST,
            )
        body = {"horarios": HorarioSerializer(creados, many=True).data}
        if advertencias:
            body["advertencias"] = advertencias
            return Response(body, status=status.HTTP_207_MULTI_STATUS)
        return Response(body, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        horario = self.get_object()
        ser = HorarioActualizarSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        actualizar_horario(horario, ser.validated_data)
        return Response(HorarioSerializer(self.get_queryset().get(pk=horario.pk)).data)

    @action(detail=True, methods=["get", "post"])
    def inscripciones(self, request, pk=None):
        horario = self.get_object()

        if request.method == "GET":
            activas = horario.inscripciones.filter(estado="activa").select_related("estudiante")
            return Response(InscripcionSerializer(activas, many=True).data)

        ser = InscripcionLoteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        resultado = inscribir_estudiantes(horario, ser.validated_data["estudiante_ids"])

        codigo = resultado.status_http()
        body = {
            "inscripciones": InscripcionSerializer(resultado.inscritos, many=True).data,
            "duplicados": resultado.duplicados,
            "conflictos": resultado.conflictos,
            "errores": resultado.errores,
        }
        if codigo == status.HTTP_400_BAD_REQUEST:
            return Response(
                cuerpo_error("No se pudo inscribir a ningún estudiante", resultado.duplicados + resultado.errores),
                status=codigo,
            )
        return Response(body, status=codigo)


class InscripcionViewSet(mixins.RetrieveModelMixin,
                         mixins.DestroyModelMixin,
                         viewsets.GenericViewSet):
    """DELETE cancela la inscripción (no borra la fila)."""
    serializer_class = InscripcionSerializer
    permission_classes = [IsAuthenticated & EsDirector]

    def get_queryset(self):
        return filtrar_por_academia(
            Inscripcion.objects.select_related("estudiante", "horario"), self.request, campo="horario__academia_id"
        )

    def destroy(self, request, *args, **kwargs):
        inscripcion = cancelar_inscripcion(self.get_object())
        return Response(InscripcionSerializer(inscripcion).data, status=status.HTTP_200_OK)


# ------------------------------------------------------------------------------
# Matrículas (estudiante ↔ curso)
# ------------------------------------------------------------------------------
class MatriculaViewSet(_BajaLogicaMixin, viewsets.ModelViewSet):
    filter_backends = [DjangoFilterBackend]
    filterset_class = MatriculaFilter
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_permissions(self):
        if self.action in ("list", "retrieve") or (self.action == "canciones" and self.request.method == "GET"):
            return [IsAuthenticated(), EsDirectorOProfesor(), EsDeSuAcademia()]
        return [IsAuthenticated(), EsDirector(), EsDeSuAcademia()]

    def get_serializer_class(self):
        if self.action == "create":
            return MatriculaCrearSerializer
        if self.action == "partial_update":
            return MatriculaEstadoSerializer
        return MatriculaSerializer

    def get_queryset(self):
        qs = (
            Matricula.objects.vigentes()
            .filter(
                estudiante__deleted_at__isnull=True,
                curso__materia__deleted_at__isnull=True,
                curso__periodo__deleted_at__isnull=True,
            )
            .select_related("estudiante", "curso__materia", "curso__periodo")
            .annotate(canciones_count=Count("vinculos_canciones", filter=Q(vinculos_canciones__cancion__deleted_at__isnull=True)))
            .order_by("-creado_en")
        )
        qs = filtrar_por_academia(qs, self.request)
        if get_rol_actual(self.request) == ROL_PROFESOR:
            qs = qs.filter(curso__profesor=self.request.user)
        return qs

    def create(self, request, *args, **kwargs):
        ser = MatriculaCrearSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        academia = exigir_academia(request)
        matricula = crear_matricula(
            academia,
            ser.validated_data["estudiante_id"],
            ser.validated_data["curso_id"],
            ser.validated_data.get("cancion_ids"),
        )
        return Response(MatriculaSerializer(self.get_queryset().get(pk=matricula.pk)).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        matricula = self.get_object()
        ser = MatriculaEstadoSerializer(matricula, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        ser.save()
        return Response(MatriculaSerializer(self.get_queryset().get(pk=matricula.pk)).data)

    @action(detail=True, methods=["get", "post", "delete"])
    def canciones(self, request, pk=None):
        matricula = self.get_object()

        if request.method == "GET":
            canciones = Cancion.objects.vigentes().filter(matriculacancion__matricula=matricula)
            return Response(CancionSerializer(canciones, many=True).data)

        if request.method == "POST":
            ser = CancionIdsSerializer(data=request.data)
            ser.is_valid(raise_exception=True)
            agregadas = vincular_canciones(matricula, ser.validated_data["cancion_ids"])
            return Response({"agregadas": agregadas}, status=status.HTTP_201_CREATED)

        cancion_id = request.query_params.get("cancion_id")
        if not cancion_id:
            raise Validacion("cancion_id es requerido")
        borrados, _ = MatriculaCancion.objects.filter(matricula=matricula, cancion_id=cancion_id).delete()
        if not borrados:
            raise NoEncontrado("La canción no está asignada a esta matrícula")
        return Response(status=status.HTTP_204_NO_CONTENT)
