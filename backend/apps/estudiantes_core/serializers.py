# apps/estudiantes_core/serializers.py
from rest_framework import serializers

from apps.common.logging import LoggedModelSerializer
from apps.estudiantes_core.models import EncargadoEstudiante, Estudiante


class EstudianteSerializer(LoggedModelSerializer):
    encargados = serializers.SerializerMethodField()

    class Meta:
        model = Estudiante
        fields = [
            "id", "nombre", "apellido", "fecha_nacimiento", "email", "telefono",
            "estado_inscripcion", "notas", "academia", "encargados", "creado_en",
        ]
        read_only_fields = ["id", "academia", "creado_en"]

    def get_encargados(self, obj):
        return [
            {"id": v.encargado_id, "nombre": v.encargado.nombre_completo, "relacion": v.relacion}
            for v in obj.vinculos_encargados.all()
            if v.encargado.deleted_at is None
        ]


class VinculoEncargadoSerializer(serializers.ModelSerializer):
    estudiante_id = serializers.IntegerField()
    estudiante_nombre = serializers.CharField(source="estudiante.nombre_completo", read_only=True)

    class Meta:
        model = EncargadoEstudiante
        fields = ["id", "estudiante_id", "estudiante_nombre", "relacion", "creado_en"]
        read_only_fields = ["id", "creado_en"]
