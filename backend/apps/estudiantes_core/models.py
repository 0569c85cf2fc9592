# apps/estudiantes_core/models.py

from django.conf import settings
from django.db import models

from apps.common.models import SoftDeleteModel, TimeStampedModel


class Estudiante(SoftDeleteModel, TimeStampedModel):
    ESTADOS_INSCRIPCION = [
        ("inscrito", "Inscrito"),
        ("retirado", "Retirado"),
        ("graduado", "Graduado"),
    ]

    academia = models.ForeignKey("academias_core.Academia", on_delete=models.PROTECT, related_name="estudiantes")
    # Cuenta de login opcional (estudiantes adultos)
    usuario = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="estudiante"
    )
    nombre = models.CharField(max_length=150)
    apellido = models.CharField(max_length=150, blank=True)
    fecha_nacimiento = models.DateField(null=True, blank=True)
    email = models.EmailField(blank=True)
    telefono = models.CharField(max_length=30, blank=True)
    estado_inscripcion = models.CharField(max_length=10, choices=ESTADOS_INSCRIPCION, default="inscrito")
    notas = models.TextField(blank=True)

    class Meta:
        ordering = ["apellido", "nombre"]
        indexes = [models.Index(fields=["academia", "estado_inscripcion"])]

    def __str__(self):
        return self.nombre_completo

    @property
    def nombre_completo(self):
        return f"{self.nombre} {self.apellido}".strip()

    @property
    def retirado(self):
        return self.estado_inscripcion == "retirado"


class EncargadoEstudiante(models.Model):
    """Vínculo encargado (padre/madre/tutor) ↔ estudiante."""
    encargado = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="vinculos_estudiantes"
    )
    estudiante = models.ForeignKey(Estudiante, on_delete=models.CASCADE, related_name="vinculos_encargados")
    relacion = models.CharField(max_length=50, blank=True, help_text="Ej: madre, padre, tutor")
    creado_en = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["encargado", "estudiante"], name="uniq_encargado_estudiante"),
        ]

    def __str__(self):
        return f"{self.encargado_id} -> {self.estudiante_id} ({self.relacion})"
