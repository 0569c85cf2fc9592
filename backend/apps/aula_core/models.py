# apps/aula_core/models.py
"""
Registros de clase: todo se ancla a (matrícula, fecha de período) y se escribe por upsert.
"""

from django.conf import settings
from django.db import models

from apps.common.models import TimeStampedModel


class Asistencia(TimeStampedModel):
    ESTADOS = [
        ("presente", "Presente"),
        ("ausente", "Ausente"),
        ("tardanza", "Tardanza"),
        ("justificado", "Justificado"),
    ]

    matricula = models.ForeignKey("cursos_core.Matricula", on_delete=models.CASCADE, related_name="asistencias")
    fecha_periodo = models.ForeignKey("cursos_core.FechaPeriodo", on_delete=models.CASCADE, related_name="asistencias")
    estado = models.CharField(max_length=12, choices=ESTADOS)
    notas = models.CharField(max_length=500, blank=True)
    registrado_por = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="+")

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["matricula", "fecha_periodo"], name="uniq_asistencia"),
        ]


class Tarea(TimeStampedModel):
    matricula = models.ForeignKey("cursos_core.Matricula", on_delete=models.CASCADE, related_name="tareas")
    fecha_periodo = models.ForeignKey("cursos_core.FechaPeriodo", on_delete=models.CASCADE, related_name="tareas")
    texto = models.TextField(max_length=2000)
    registrado_por = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="+")

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["matricula", "fecha_periodo"], name="uniq_tarea"),
        ]


class Comentario(TimeStampedModel):
    matricula = models.ForeignKey("cursos_core.Matricula", on_delete=models.CASCADE, related_name="comentarios")
    fecha_periodo = models.ForeignKey("cursos_core.FechaPeriodo", on_delete=models.CASCADE, related_name="comentarios")
    comentario = models.TextField(max_length=2000)
    registrado_por = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="+")

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["matricula", "fecha_periodo"], name="uniq_comentario"),
        ]


class Rubrica(models.Model):
    """Criterio de evaluación (ej. ritmo, afinación). `por_defecto` aplica a materias sin rúbricas propias."""
    academia = models.ForeignKey("academias_core.Academia", on_delete=models.CASCADE, related_name="rubricas")
    nombre = models.CharField(max_length=100)
    descripcion = models.CharField(max_length=255, blank=True)
    orden = models.PositiveSmallIntegerField(default=0)
    por_defecto = models.BooleanField(default=True)

    class Meta:
        ordering = ["orden", "nombre"]

    def __str__(self):
        return self.nombre


class RubricaMateria(models.Model):
    materia = models.ForeignKey("cursos_core.Materia", on_delete=models.CASCADE, related_name="rubricas")
    rubrica = models.ForeignKey(Rubrica, on_delete=models.CASCADE, related_name="materias")

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["materia", "rubrica"], name="uniq_rubrica_materia"),
        ]


class Escala(models.Model):
    """Valor posible de una evaluación (ej. 1..5, 'Logrado')."""
    academia = models.ForeignKey("academias_core.Academia", on_delete=models.CASCADE, related_name="escalas")
    nombre = models.CharField(max_length=50)
    valor = models.IntegerField()
    orden = models.PositiveSmallIntegerField(default=0)

    class Meta:
        ordering = ["orden", "valor"]

    def __str__(self):
        return f"{self.nombre} ({self.valor})"


class EvaluacionCancion(TimeStampedModel):
    """Sin escala = 'sin calificar'."""
    matricula = models.ForeignKey("cursos_core.Matricula", on_delete=models.CASCADE, related_name="evaluaciones")
    cancion = models.ForeignKey("cursos_core.Cancion", on_delete=models.CASCADE, related_name="evaluaciones")
    fecha_periodo = models.ForeignKey("cursos_core.FechaPeriodo", on_delete=models.CASCADE, related_name="evaluaciones")
    rubrica = models.ForeignKey(Rubrica, on_delete=models.CASCADE, related_name="evaluaciones")
    escala = models.ForeignKey(Escala, on_delete=models.SET_NULL, null=True, blank=True, related_name="evaluaciones")
    registrado_por = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="+")

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["matricula", "cancion", "fecha_periodo", "rubrica"], name="uniq_evaluacion_cancion"
            ),
        ]


class Insignia(models.Model):
    academia = models.ForeignKey("academias_core.Academia", on_delete=models.CASCADE, related_name="insignias")
    nombre = models.CharField(max_length=100)
    descripcion = models.CharField(max_length=255, blank=True)
    icono = models.CharField(max_length=100, blank=True)
    activo = models.BooleanField(default=True)

    class Meta:
        ordering = ["nombre"]

    def __str__(self):
        return self.nombre


class InsigniaEstudiante(models.Model):
    estudiante = models.ForeignKey("estudiantes_core.Estudiante", on_delete=models.CASCADE, related_name="insignias")
    insignia = models.ForeignKey(Insignia, on_delete=models.CASCADE, related_name="otorgadas")
    matricula = models.ForeignKey(
        "cursos_core.Matricula", on_delete=models.SET_NULL, null=True, blank=True, related_name="insignias"
    )
    otorgada_por = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="+")
    otorgada_en = models.DateTimeField(auto_now_add=True)
    notas = models.CharField(max_length=255, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["estudiante", "insignia"], name="uniq_insignia_estudiante"),
        ]
