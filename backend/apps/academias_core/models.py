# apps/academias_core/models.py

from django.db import models

from apps.common.models import SoftDeleteModel, TimeStampedModel


class Academia(SoftDeleteModel, TimeStampedModel):
    """Tenant del sistema: todo registro de negocio cuelga de una academia."""
    ESTADOS = [
        ("activo", "Activa"),
        ("inactivo", "Inactiva"),
    ]

    nombre = models.CharField(max_length=255)
    direccion = models.CharField(max_length=255, blank=True)
    telefono = models.CharField(max_length=30, blank=True)
    email = models.EmailField(blank=True)
    sitio_web = models.URLField(blank=True)
    logo_url = models.URLField(blank=True)
    zona_horaria = models.CharField(max_length=64, default="America/Argentina/Buenos_Aires")
    estado = models.CharField(max_length=10, choices=ESTADOS, default="activo")
    configuraciones_extras = models.JSONField(blank=True, null=True)

    class Meta:
        ordering = ["nombre"]

    def __str__(self):
        return self.nombre


class AcademiaDominio(models.Model):
    academia = models.ForeignKey(Academia, on_delete=models.CASCADE, related_name="dominios")
    hostname = models.CharField(max_length=255, unique=True)  # ej: escuela.academia.com
    is_primary = models.BooleanField(default=True)
    activo = models.BooleanField(default=True)
    creado_en = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [models.Index(fields=["hostname"])]

    def __str__(self):
        return f"{self.hostname} -> {self.academia_id}"
