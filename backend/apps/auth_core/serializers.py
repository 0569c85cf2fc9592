# apps/auth_core/serializers.py
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from apps.auth_core.models import ROL_ENCARGADO, ROL_PROFESOR, ROL_SUPER_ADMIN
from apps.common.logging import LoggedModelSerializer

logger = logging.getLogger(__name__)
User = get_user_model()


class TokenConRolSerializer(TokenObtainPairSerializer):
    """Login email/password: agrega rol y academia al token y bloquea academias inactivas."""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["email"] = user.email
        token["rol"] = user.rol
        token["academia_id"] = user.academia_id
        return token

    def validate(self, attrs):
        data = super().validate(attrs)
        user = self.user
        if user.deleted_at is not None or user.estado != "activo":
            raise AuthenticationFailed("Usuario inactivo")
        if user.rol != ROL_SUPER_ADMIN and user.academia.estado != "activo":
            logger.info("[auth.login][academia_inactiva] user_id=%s academia=%s", user.id, user.academia_id)
            raise AuthenticationFailed("La academia está inactiva")
        data["rol"] = user.rol
        data["academia_id"] = user.academia_id
        logger.info("[auth.login][ok] user_id=%s rol=%s", user.id, user.rol)
        return data


class UsuarioSerializer(LoggedModelSerializer):
    academia_nombre = serializers.CharField(source="academia.nombre", read_only=True, default=None)

    class Meta:
        model = User
        fields = (
            "id", "email", "nombre", "apellido", "telefono", "rol", "estado",
            "academia", "academia_nombre", "info_adicional",
        )
        read_only_fields = ["id", "email", "rol", "estado", "academia"]


class _PerfilConPasswordSerializer(LoggedModelSerializer):
    """
    Base para alta de perfiles de la academia (profesores, encargados).
    La academia y el rol los fija la vista / la subclase, nunca el payload.
    """
    rol_fijo = None

    password = serializers.CharField(write_only=True, required=False, min_length=8)

    class Meta:
        model = User
        fields = ("id", "email", "nombre", "apellido", "telefono", "estado", "info_adicional", "password")
        read_only_fields = ["id", "estado"]

    def validate_email(self, v):
        v = (v or "").strip().lower()
        qs = User.objects.filter(email=v)
        if self.instance:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("Ya existe un usuario con este email")
        return v

    def create(self, validated_data):
        password = validated_data.pop("password", None)
        validated_data["rol"] = self.rol_fijo
        user = super().create(validated_data)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(update_fields=["password"])
        return user

    def update(self, instance, validated_data):
        password = validated_data.pop("password", None)
        instance = super().update(instance, validated_data)
        if password:
            instance.set_password(password)
            instance.save(update_fields=["password"])
        return instance


class ProfesorSerializer(_PerfilConPasswordSerializer):
    rol_fijo = ROL_PROFESOR

    materia_ids = serializers.ListField(child=serializers.IntegerField(), write_only=True, required=False)
    materias = serializers.SerializerMethodField()

    class Meta(_PerfilConPasswordSerializer.Meta):
        fields = _PerfilConPasswordSerializer.Meta.fields + ("materia_ids", "materias")

    def get_materias(self, obj):
        return list(
            obj.materias_dictadas.filter(materia__deleted_at__isnull=True)
            .values("materia_id", "materia__nombre")
        )

    def _asignar_materias(self, profesor, materia_ids):
        from apps.cursos_core.models import Materia, ProfesorMateria

        validas = set(
            Materia.objects.vigentes()
            .filter(id__in=materia_ids, academia_id=profesor.academia_id)
            .values_list("id", flat=True)
        )
        invalidas = sorted(set(materia_ids) - validas)
        if invalidas:
            raise serializers.ValidationError({"materia_ids": f"Materias inexistentes o de otra academia: {invalidas}"})
        ProfesorMateria.objects.filter(profesor=profesor).exclude(materia_id__in=validas).delete()
        for materia_id in validas:
            ProfesorMateria.objects.get_or_create(profesor=profesor, materia_id=materia_id)

    @transaction.atomic
    def create(self, validated_data):
        materia_ids = validated_data.pop("materia_ids", [])
        profesor = super().create(validated_data)
        if materia_ids:
            self._asignar_materias(profesor, materia_ids)
        return profesor

    @transaction.atomic
    def update(self, instance, validated_data):
        materia_ids = validated_data.pop("materia_ids", None)
        instance = super().update(instance, validated_data)
        if materia_ids is not None:
            self._asignar_materias(instance, materia_ids)
        return instance


class EncargadoSerializer(_PerfilConPasswordSerializer):
    rol_fijo = ROL_ENCARGADO

    estudiantes = serializers.SerializerMethodField()

    class Meta(_PerfilConPasswordSerializer.Meta):
        fields = _PerfilConPasswordSerializer.Meta.fields + ("estudiantes",)

    def get_estudiantes(self, obj):
        return [
            {"id": v.estudiante_id, "nombre": v.estudiante.nombre_completo, "relacion": v.relacion}
            for v in obj.vinculos_estudiantes.select_related("estudiante").filter(estudiante__deleted_at__isnull=True)
        ]


class CambiarEstadoSerializer(serializers.Serializer):
    estado = serializers.ChoiceField(choices=["activo", "inactivo"])
