# apps/aula_core/serializers.py
from rest_framework import serializers

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


class _RegistroClaseSerializer(serializers.ModelSerializer):
    matricula_id = serializers.IntegerField()
    fecha_periodo_id = serializers.IntegerField()


class AsistenciaSerializer(_RegistroClaseSerializer):
    notas = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")

    class Meta:
        model = Asistencia
        fields = ["id", "matricula_id", "fecha_periodo_id", "estado", "notas", "actualizado_en"]
        read_only_fields = ["id", "actualizado_en"]


class TareaSerializer(_RegistroClaseSerializer):
    texto = serializers.CharField(max_length=2000)

    class Meta:
        model = Tarea
        fields = ["id", "matricula_id", "fecha_periodo_id", "texto", "actualizado_en"]
        read_only_fields = ["id", "actualizado_en"]


class ComentarioSerializer(_RegistroClaseSerializer):
    comentario = serializers.CharField(max_length=2000)

    class Meta:
        model = Comentario
        fields = ["id", "matricula_id", "fecha_periodo_id", "comentario", "actualizado_en"]
        read_only_fields = ["id", "actualizado_en"]


class EvaluacionCancionSerializer(_RegistroClaseSerializer):
    cancion_id = serializers.IntegerField()
    rubrica_id = serializers.IntegerField()
    escala_id = serializers.IntegerField(required=False, allow_null=True)

    class Meta:
        model = EvaluacionCancion
        fields = ["id", "matricula_id", "fecha_periodo_id", "cancion_id", "rubrica_id", "escala_id", "actualizado_en"]
        read_only_fields = ["id", "actualizado_en"]


class RubricaSerializer(serializers.ModelSerializer):
    class Meta:
        model = Rubrica
        fields = ["id", "nombre", "descripcion", "orden"]


class EscalaSerializer(serializers.ModelSerializer):
    class Meta:
        model = Escala
        fields = ["id", "nombre", "valor", "orden"]


class InsigniaSerializer(serializers.ModelSerializer):
    class Meta:
        model = Insignia
        fields = ["id", "nombre", "descripcion", "icono", "activo"]


class InsigniaEstudianteSerializer(serializers.ModelSerializer):
    estudiante_id = serializers.IntegerField()
    insignia_id = serializers.IntegerField()
    matricula_id = serializers.IntegerField(required=False, allow_null=True)
    insignia = InsigniaSerializer(read_only=True)

    class Meta:
        model = InsigniaEstudiante
        fields = ["id", "estudiante_id", "insignia_id", "matricula_id", "insignia", "notas", "otorgada_en"]
        read_only_fields = ["id", "insignia", "otorgada_en"]
