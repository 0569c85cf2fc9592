# apps/cursos_core/serializers.py
import logging

from rest_framework import serializers

from apps.common.fechas import hhmm
from apps.common.logging import LoggedModelSerializer
from apps.cursos_core.models import (
    PERIODOS,
    Cancion,
    Curso,
    FechaPeriodo,
    Horario,
    Inscripcion,
    Materia,
    Matricula,
    Periodo,
)

logger = logging.getLogger(__name__)


# ===== Catálogos =====
class MateriaSerializer(LoggedModelSerializer):
    class Meta:
        model = Materia
        fields = ["id", "nombre", "descripcion", "academia", "creado_en"]
        read_only_fields = ["id", "academia", "creado_en"]

    def validate_nombre(self, v):
        v = v.strip()
        academia_id = self.context.get("academia_id")
        qs = Materia.objects.vigentes().filter(academia_id=academia_id, nombre__iexact=v)
        if self.instance:
            qs = qs.exclude(pk=self.instance.pk)
        if academia_id and qs.exists():
            raise serializers.ValidationError("Ya existe una materia con ese nombre")
        return v


class CancionSerializer(LoggedModelSerializer):
    class Meta:
        model = Cancion
        fields = ["id", "titulo", "autor", "dificultad", "notas", "academia", "creado_en"]
        read_only_fields = ["id", "academia", "creado_en"]


# ===== Períodos =====
class PeriodoSerializer(serializers.ModelSerializer):
    anio = serializers.IntegerField(min_value=2000, max_value=2100)
    periodo = serializers.ChoiceField(choices=PERIODOS)
    cantidad_fechas = serializers.SerializerMethodField()

    class Meta:
        model = Periodo
        fields = ["id", "anio", "periodo", "descripcion", "academia", "cantidad_fechas"]
        read_only_fields = ["id", "academia"]

    def get_cantidad_fechas(self, obj):
        return obj.fechas.filter(deleted_at__isnull=True).count()


class FechaPeriodoSerializer(serializers.ModelSerializer):
    materia_id = serializers.IntegerField(required=False, allow_null=True)
    profesor_id = serializers.IntegerField(required=False, allow_null=True)
    materia_nombre = serializers.CharField(source="materia.nombre", read_only=True, default=None)

    class Meta:
        model = FechaPeriodo
        fields = ["id", "periodo", "fecha", "tipo", "descripcion", "materia_id", "materia_nombre", "profesor_id"]
        read_only_fields = ["id", "periodo"]

    def validate(self, attrs):
        tipo = attrs.get("tipo", getattr(self.instance, "tipo", None))
        materia_id = attrs.get("materia_id", getattr(self.instance, "materia_id", None))
        profesor_id = attrs.get("profesor_id", getattr(self.instance, "profesor_id", None))
        if tipo == "clase" and (not materia_id or not profesor_id):
            raise serializers.ValidationError("Las fechas de clase requieren materia_id y profesor_id")
        return attrs


# ===== Cursos =====
class TurnoSerializer(serializers.Serializer):
    dia_semana = serializers.IntegerField(min_value=1, max_value=7)
    hora_inicio = serializers.TimeField()
    hora_fin = serializers.TimeField()


class HorarioResumenSerializer(serializers.ModelSerializer):
    hora_inicio = serializers.SerializerMethodField()
    hora_fin = serializers.SerializerMethodField()

    class Meta:
        model = Horario
        fields = ["id", "nombre", "dia_semana", "hora_inicio", "hora_fin", "aula"]

    def get_hora_inicio(self, obj):
        return hhmm(obj.hora_inicio)

    def get_hora_fin(self, obj):
        return hhmm(obj.hora_fin)


class CursoSerializer(serializers.ModelSerializer):
    materia_nombre = serializers.CharField(source="materia.nombre", read_only=True)
    profesor_nombre = serializers.CharField(source="profesor.nombre_completo", read_only=True)
    periodo_nombre = serializers.CharField(source="periodo.__str__", read_only=True)
    sesiones_count = serializers.IntegerField(read_only=True, default=0)
    turnos_count = serializers.IntegerField(read_only=True, default=0)
    estudiantes_count = serializers.IntegerField(read_only=True, default=0)
    turnos = serializers.SerializerMethodField()

    class Meta:
        model = Curso
        fields = [
            "id", "academia", "profesor", "profesor_nombre", "materia", "materia_nombre",
            "periodo", "periodo_nombre", "mensualidad", "sesiones_count", "turnos_count",
            "estudiantes_count", "turnos", "creado_en",
        ]
        read_only_fields = fields

    def get_turnos(self, obj):
        return HorarioResumenSerializer(obj.horarios.vigentes(), many=True).data


class CursoCrearSerializer(serializers.Serializer):
    anio = serializers.IntegerField(min_value=2000, max_value=2100)
    periodo = serializers.ChoiceField(choices=PERIODOS)
    materia_id = serializers.IntegerField()
    profesor_id = serializers.IntegerField()
    turnos = TurnoSerializer(many=True, allow_empty=False)
    fechas_sesion = serializers.ListField(child=serializers.DateField(), required=False)
    fecha_inicio = serializers.DateField(required=False)
    fecha_fin = serializers.DateField(required=False)
    mensualidad = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True, min_value=0)

    def validate(self, attrs):
        if not attrs.get("fechas_sesion") and bool(attrs.get("fecha_inicio")) != bool(attrs.get("fecha_fin")):
            raise serializers.ValidationError("fecha_inicio y fecha_fin van juntas")
        return attrs


class CursoActualizarSerializer(serializers.ModelSerializer):
    mensualidad = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True, min_value=0)

    class Meta:
        model = Curso
        fields = ["mensualidad"]


# ===== Horarios / Inscripciones =====
class HorarioSerializer(HorarioResumenSerializer):
    profesor_nombre = serializers.CharField(source="profesor.nombre_completo", read_only=True)
    inscriptos = serializers.IntegerField(read_only=True, default=0)

    class Meta(HorarioResumenSerializer.Meta):
        fields = HorarioResumenSerializer.Meta.fields + [
            "profesor", "profesor_nombre", "materia", "periodo", "curso", "capacidad", "inscriptos",
        ]


class HorarioCrearSerializer(serializers.Serializer):
    """
    Alta de horarios: `time_slots` (una franja por elemento) o el formato
    anterior `dias_semana` + `hora_inicio` + `hora_fin` (misma franja en varios días).
    """
    profesor_id = serializers.IntegerField()
    nombre = serializers.CharField(max_length=150)
    materia_id = serializers.IntegerField(required=False, allow_null=True)
    periodo_id = serializers.IntegerField(required=False, allow_null=True)
    curso_id = serializers.IntegerField(required=False, allow_null=True)
    aula = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    capacidad = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    time_slots = serializers.ListField(child=serializers.DictField(), required=False)
    dias_semana = serializers.ListField(child=serializers.IntegerField(), required=False)
    hora_inicio = serializers.CharField(required=False)
    hora_fin = serializers.CharField(required=False)

    def validate(self, attrs):
        franjas = attrs.get("time_slots")
        if not franjas:
            dias = attrs.get("dias_semana") or []
            if not dias or not attrs.get("hora_inicio") or not attrs.get("hora_fin"):
                raise serializers.ValidationError("Enviar time_slots o dias_semana + hora_inicio + hora_fin")
            franjas = [
                {"dia_semana": d, "hora_inicio": attrs["hora_inicio"], "hora_fin": attrs["hora_fin"]}
                for d in dias
            ]
        attrs["franjas"] = franjas
        return attrs


class HorarioActualizarSerializer(serializers.Serializer):
    nombre = serializers.CharField(max_length=150, required=False)
    dia_semana = serializers.IntegerField(min_value=1, max_value=7, required=False)
    hora_inicio = serializers.TimeField(required=False)
    hora_fin = serializers.TimeField(required=False)
    aula = serializers.CharField(max_length=50, required=False, allow_blank=True)
    capacidad = serializers.IntegerField(required=False, allow_null=True, min_value=1)


class InscripcionSerializer(serializers.ModelSerializer):
    estudiante_nombre = serializers.CharField(source="estudiante.nombre_completo", read_only=True)

    class Meta:
        model = Inscripcion
        fields = ["id", "estudiante", "estudiante_nombre", "horario", "profesor", "estado", "fecha_inscripcion"]
        read_only_fields = fields


class InscripcionLoteSerializer(serializers.Serializer):
    estudiante_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)


# ===== Matrículas =====
class MatriculaSerializer(serializers.ModelSerializer):
    estudiante_nombre = serializers.CharField(source="estudiante.nombre_completo", read_only=True)
    materia_id = serializers.IntegerField(source="curso.materia_id", read_only=True)
    materia_nombre = serializers.CharField(source="curso.materia.nombre", read_only=True)
    periodo_id = serializers.IntegerField(source="curso.periodo_id", read_only=True)
    periodo_nombre = serializers.CharField(source="curso.periodo.__str__", read_only=True)
    profesor_id = serializers.IntegerField(source="curso.profesor_id", read_only=True)
    canciones_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Matricula
        fields = [
            "id", "estudiante", "estudiante_nombre", "curso", "materia_id", "materia_nombre",
            "periodo_id", "periodo_nombre", "profesor_id", "estado", "canciones_count", "creado_en",
        ]
        read_only_fields = fields


class MatriculaCrearSerializer(serializers.Serializer):
    estudiante_id = serializers.IntegerField()
    curso_id = serializers.IntegerField()
    cancion_ids = serializers.ListField(child=serializers.IntegerField(), required=False)


class MatriculaEstadoSerializer(serializers.ModelSerializer):
    class Meta:
        model = Matricula
        fields = ["estado"]


class CancionIdsSerializer(serializers.Serializer):
    cancion_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
