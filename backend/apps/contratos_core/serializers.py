# apps/contratos_core/serializers.py
from rest_framework import serializers

from apps.contratos_core.models import Contrato, FacturaContrato
from apps.contratos_core.services.facturacion import estado_visible


class FacturaContratoSerializer(serializers.ModelSerializer):
    estado_visible = serializers.SerializerMethodField()

    class Meta:
        model = FacturaContrato
        fields = ["id", "contrato", "mes", "monto", "estado", "estado_visible", "pagado_en"]
        read_only_fields = fields

    def get_estado_visible(self, obj):
        return estado_visible(obj, self.context.get("hoy"))


class ContratoSerializer(serializers.ModelSerializer):
    encargado_nombre = serializers.CharField(source="encargado.nombre_completo", read_only=True)
    facturas_count = serializers.IntegerField(read_only=True, default=0)
    facturas_pendientes = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Contrato
        fields = [
            "id", "encargado", "encargado_nombre", "tipo", "estado", "monto_mensual",
            "fecha_inicio", "fecha_fin", "notas", "facturas_count", "facturas_pendientes", "creado_en",
        ]
        read_only_fields = fields


class ContratoDetalleSerializer(ContratoSerializer):
    matriculas = serializers.SerializerMethodField()
    facturas = FacturaContratoSerializer(many=True, read_only=True)

    class Meta(ContratoSerializer.Meta):
        fields = ContratoSerializer.Meta.fields + ["matriculas", "facturas"]
        read_only_fields = fields

    def get_matriculas(self, obj):
        return [
            {
                "id": m.id,
                "estudiante_id": m.estudiante_id,
                "estudiante_nombre": m.estudiante.nombre_completo,
                "curso_id": m.curso_id,
                "materia": m.curso.materia.nombre,
                "periodo": str(m.curso.periodo),
            }
            for m in obj.matriculas.select_related("estudiante", "curso__materia", "curso__periodo")
        ]


class ContratoCrearSerializer(serializers.Serializer):
    encargado_id = serializers.IntegerField()
    matricula_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    monto_mensual = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    fecha_inicio = serializers.DateField()
    fecha_fin = serializers.DateField()
    notas = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if attrs["fecha_fin"] < attrs["fecha_inicio"]:
            raise serializers.ValidationError({"fecha_fin": "Debe ser posterior a fecha_inicio"})
        return attrs


class ItemEspecialSerializer(serializers.Serializer):
    estudiante_id = serializers.IntegerField()
    curso_id = serializers.IntegerField()


class ContratoEspecialSerializer(serializers.Serializer):
    encargado_id = serializers.IntegerField()
    items = ItemEspecialSerializer(many=True, allow_empty=False)
    monto_mensual = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    notas = serializers.CharField(required=False, allow_blank=True, default="")


class RangoFechasSerializer(serializers.Serializer):
    matricula_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)


class MatriculaGrupalSerializer(serializers.Serializer):
    curso_id = serializers.IntegerField()
    estudiante_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)


class FacturaEstadoSerializer(serializers.Serializer):
    estado = serializers.CharField()

    def validate_estado(self, v):
        if v != "pagado":
            raise serializers.ValidationError("Solo se admite el estado 'pagado'")
        return v
