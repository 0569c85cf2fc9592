# apps/auth_core/models.py
"""
Usuario único del sistema: el rol y la academia viven en la misma fila.
Un usuario pertenece a una sola academia (salvo super_admin, que es global).
"""

from django.contrib.auth.base_user import BaseUserManager
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone

from apps.common.models import SoftDeleteModel, SoftDeleteQuerySet

ROL_SUPER_ADMIN = "super_admin"
ROL_DIRECTOR = "director"
ROL_PROFESOR = "profesor"
ROL_ENCARGADO = "encargado"
ROL_ESTUDIANTE = "estudiante"


class UsuarioManager(BaseUserManager.from_queryset(SoftDeleteQuerySet)):
    use_in_migrations = True

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("El email es obligatorio")
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.update(rol=ROL_SUPER_ADMIN, is_staff=True, is_superuser=True)
        return self.create_user(email, password, **extra_fields)


class Usuario(AbstractUser, SoftDeleteModel):
    ROLES = [
        (ROL_SUPER_ADMIN, "Super Admin"),
        (ROL_DIRECTOR, "Director"),
        (ROL_PROFESOR, "Profesor"),
        (ROL_ENCARGADO, "Encargado"),
        (ROL_ESTUDIANTE, "Estudiante"),
    ]
    ESTADOS = [
        ("activo", "Activo"),
        ("inactivo", "Inactivo"),
    ]

    email = models.EmailField(unique=True)
    nombre = models.CharField(max_length=150)
    apellido = models.CharField(max_length=150, blank=True)
    telefono = models.CharField(max_length=30, blank=True)
    rol = models.CharField(max_length=20, choices=ROLES, default=ROL_ESTUDIANTE)
    academia = models.ForeignKey(
        "academias_core.Academia",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="usuarios",
        help_text="Nulo solo para super_admin.",
    )
    estado = models.CharField(max_length=10, choices=ESTADOS, default="activo")
    info_adicional = models.JSONField(blank=True, null=True)
    username = models.CharField(max_length=150, blank=True, null=True, unique=False)

    objects = UsuarioManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        indexes = [models.Index(fields=["academia", "rol"])]

    def save(self, *args, **kwargs):
        if not self.username:
            self.username = self.email
        if self.rol != ROL_SUPER_ADMIN and not self.academia_id:
            raise ValueError("Usuarios que no son super_admin deben tener una academia asignada.")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.email} ({self.rol})"

    @property
    def is_super_admin(self):
        return self.rol == ROL_SUPER_ADMIN

    @property
    def nombre_completo(self):
        return f"{self.nombre} {self.apellido}".strip()

    def cambiar_estado(self, estado):
        """activo|inactivo; un usuario inactivo no puede loguearse."""
        self.estado = estado
        self.is_active = estado == "activo"
        self.save(update_fields=["estado", "is_active"])

    def soft_delete(self):
        self.deleted_at = timezone.now()
        self.is_active = False
        self.save(update_fields=["deleted_at", "is_active"])
