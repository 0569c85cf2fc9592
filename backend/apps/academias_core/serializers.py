# apps/academias_core/serializers.py
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework import serializers

from apps.academias_core.models import Academia, AcademiaDominio
from apps.auth_core.models import ROL_DIRECTOR
from apps.common.logging import LoggedModelSerializer

logger = logging.getLogger(__name__)
User = get_user_model()


class AcademiaDominioSerializer(serializers.ModelSerializer):
    class Meta:
        model = AcademiaDominio
        fields = ["id", "hostname", "is_primary", "activo"]


class AcademiaSerializer(LoggedModelSerializer):
    dominios = AcademiaDominioSerializer(many=True, read_only=True)

    # Alta opcional del director inicial
    director_email = serializers.EmailField(write_only=True, required=False)
    director_nombre = serializers.CharField(write_only=True, required=False)
    director_apellido = serializers.CharField(write_only=True, required=False, allow_blank=True)
    director_password = serializers.CharField(write_only=True, required=False, min_length=8)

    cantidad_estudiantes = serializers.SerializerMethodField()
    cantidad_profesores = serializers.SerializerMethodField()

    class Meta:
        model = Academia
        fields = [
            "id", "nombre", "direccion", "telefono", "email", "sitio_web", "logo_url",
            "zona_horaria", "estado", "configuraciones_extras", "dominios",
            "director_email", "director_nombre", "director_apellido", "director_password",
            "cantidad_estudiantes", "cantidad_profesores", "creado_en",
        ]
        read_only_fields = ["id", "estado", "creado_en"]

    def get_cantidad_estudiantes(self, obj):
        return obj.estudiantes.filter(deleted_at__isnull=True).count()

    def get_cantidad_profesores(self, obj):
        return obj.usuarios.filter(rol="profesor", deleted_at__isnull=True).count()

    def validate(self, attrs):
        if attrs.get("director_email"):
            if not attrs.get("director_nombre"):
                raise serializers.ValidationError({"director_nombre": "Requerido cuando se indica director_email"})
            if User.objects.filter(email=attrs["director_email"].lower()).exists():
                raise serializers.ValidationError({"director_email": "Ya existe un usuario con este email"})
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        director = {
            "email": validated_data.pop("director_email", None),
            "nombre": validated_data.pop("director_nombre", ""),
            "apellido": validated_data.pop("director_apellido", ""),
            "password": validated_data.pop("director_password", None),
        }
        academia = super().create(validated_data)

        # si falla el alta del director, la transacción descarta también la academia
        if director["email"]:
            user = User.objects.create_user(
                email=director["email"],
                password=director["password"],
                nombre=director["nombre"],
                apellido=director["apellido"],
                rol=ROL_DIRECTOR,
                academia=academia,
            )
            logger.info("[academias.crear][director] academia=%s director=%s", academia.id, user.id)
        return academia

    def update(self, instance, validated_data):
        for campo in ("director_email", "director_nombre", "director_apellido", "director_password"):
            validated_data.pop(campo, None)
        return super().update(instance, validated_data)


class AcademiaEstadoSerializer(serializers.Serializer):
    estado = serializers.ChoiceField(choices=[c for c, _ in Academia.ESTADOS])
