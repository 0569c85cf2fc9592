# apps/cursos_core/models.py

from django.conf import settings
from django.db import models
from django.db.models import Q

from apps.common.fechas import DIA_SEMANA_CHOICES, hhmm
from apps.common.models import SoftDeleteModel, TimeStampedModel

PERIODOS = [(p, p) for p in ("I", "II", "III", "IV", "V", "VI")]

TIPOS_FECHA = [
    ("inicio", "Inicio de período"),
    ("cierre", "Cierre de período"),
    ("feriado", "Feriado"),
    ("recital", "Recital"),
    ("clase", "Clase"),
    ("otro", "Otro"),
]


class Materia(SoftDeleteModel, TimeStampedModel):
    academia = models.ForeignKey("academias_core.Academia", on_delete=models.PROTECT, related_name="materias")
    nombre = models.CharField(max_length=150)
    descripcion = models.TextField(blank=True)

    class Meta:
        ordering = ["nombre"]
        constraints = [
            models.UniqueConstraint(
                fields=["academia", "nombre"],
                condition=Q(deleted_at__isnull=True),
                name="uniq_materia_vigente_por_academia",
            ),
        ]

    def __str__(self):
        return self.nombre


class ProfesorMateria(models.Model):
    """Materias que puede dictar un profesor."""
    profesor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="materias_dictadas")
    materia = models.ForeignKey(Materia, on_delete=models.CASCADE, related_name="profesores")

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["profesor", "materia"], name="uniq_profesor_materia"),
        ]


class Periodo(SoftDeleteModel, TimeStampedModel):
    academia = models.ForeignKey("academias_core.Academia", on_delete=models.PROTECT, related_name="periodos")
    anio = models.PositiveIntegerField()
    periodo = models.CharField(max_length=3, choices=PERIODOS)
    descripcion = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ["-anio", "periodo"]
        constraints = [
            models.UniqueConstraint(
                fields=["academia", "anio", "periodo"],
                condition=Q(deleted_at__isnull=True),
                name="uniq_periodo_vigente_por_academia",
            ),
        ]

    def __str__(self):
        return f"{self.anio}-{self.periodo}"


class FechaPeriodo(SoftDeleteModel, TimeStampedModel):
    """
    Fecha puntual de un período. Las de tipo `clase` llevan materia y profesor
    y forman el calendario de sesiones del curso (periodo, materia, profesor).
    """
    periodo = models.ForeignKey(Periodo, on_delete=models.CASCADE, related_name="fechas")
    fecha = models.DateField()
    tipo = models.CharField(max_length=10, choices=TIPOS_FECHA)
    descripcion = models.CharField(max_length=255, blank=True)
    materia = models.ForeignKey(Materia, on_delete=models.SET_NULL, null=True, blank=True, related_name="fechas")
    profesor = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="fechas_clase"
    )

    class Meta:
        ordering = ["fecha", "id"]
        indexes = [models.Index(fields=["periodo", "tipo", "materia", "profesor"])]

    def __str__(self):
        return f"{self.fecha} ({self.tipo})"


class Curso(SoftDeleteModel, TimeStampedModel):
    """La terna (profesor, materia, período): lo que el estudiante cursa y se factura."""
    academia = models.ForeignKey("academias_core.Academia", on_delete=models.PROTECT, related_name="cursos")
    profesor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="cursos")
    materia = models.ForeignKey(Materia, on_delete=models.PROTECT, related_name="cursos")
    periodo = models.ForeignKey(Periodo, on_delete=models.PROTECT, related_name="cursos")
    mensualidad = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True,
        help_text="Cuota mensual por estudiante (matrícula grupal con contrato).",
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["profesor", "materia", "periodo"],
                condition=Q(deleted_at__isnull=True),
                name="uniq_curso_vigente",
            ),
        ]

    def __str__(self):
        return f"{self.materia} · {self.periodo} · {self.profesor_id}"

    def fechas_clase(self):
        return FechaPeriodo.objects.vigentes().filter(
            periodo_id=self.periodo_id,
            materia_id=self.materia_id,
            profesor_id=self.profesor_id,
            tipo="clase",
        ).order_by("fecha")


class Horario(SoftDeleteModel, TimeStampedModel):
    """Franja semanal recurrente de un profesor. dia_semana: 1=Lunes … 7=Domingo."""
    academia = models.ForeignKey("academias_core.Academia", on_delete=models.PROTECT, related_name="horarios")
    profesor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="horarios")
    curso = models.ForeignKey(Curso, on_delete=models.SET_NULL, null=True, blank=True, related_name="horarios")
    materia = models.ForeignKey(Materia, on_delete=models.SET_NULL, null=True, blank=True, related_name="horarios")
    periodo = models.ForeignKey(Periodo, on_delete=models.SET_NULL, null=True, blank=True, related_name="horarios")
    nombre = models.CharField(max_length=150)
    dia_semana = models.PositiveSmallIntegerField(choices=DIA_SEMANA_CHOICES)
    hora_inicio = models.TimeField()
    hora_fin = models.TimeField()
    aula = models.CharField(max_length=50, blank=True)
    capacidad = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        ordering = ["dia_semana", "hora_inicio"]
        indexes = [models.Index(fields=["academia", "profesor", "dia_semana"])]
        constraints = [
            models.CheckConstraint(condition=Q(hora_fin__gt=models.F("hora_inicio")), name="horario_fin_mayor_inicio"),
            models.CheckConstraint(condition=Q(dia_semana__gte=1, dia_semana__lte=7), name="horario_dia_semana_valido"),
        ]

    def __str__(self):
        return f"{self.nombre} ({self.get_dia_semana_display()}, {hhmm(self.hora_inicio)}-{hhmm(self.hora_fin)})"


class Inscripcion(TimeStampedModel):
    """Estudiante ↔ horario. Nunca se borra: se cancela o se reactiva."""
    ESTADOS = [
        ("activa", "Activa"),
        ("completada", "Completada"),
        ("cancelada", "Cancelada"),
    ]

    estudiante = models.ForeignKey("estudiantes_core.Estudiante", on_delete=models.CASCADE, related_name="inscripciones")
    horario = models.ForeignKey(Horario, on_delete=models.CASCADE, related_name="inscripciones")
    profesor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="inscripciones_dictadas")
    estado = models.CharField(max_length=12, choices=ESTADOS, default="activa")
    fecha_inscripcion = models.DateField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["estudiante", "horario"], name="uniq_inscripcion_estudiante_horario"),
        ]
        indexes = [models.Index(fields=["estudiante", "estado"])]

    def __str__(self):
        return f"{self.estudiante_id} @ {self.horario_id} ({self.estado})"


class Matricula(SoftDeleteModel, TimeStampedModel):
    """Estudiante ↔ curso (profesor, materia, período)."""
    ESTADOS = [
        ("activa", "Activa"),
        ("finalizada", "Finalizada"),
        ("cancelada", "Cancelada"),
    ]

    academia = models.ForeignKey("academias_core.Academia", on_delete=models.PROTECT, related_name="matriculas")
    estudiante = models.ForeignKey("estudiantes_core.Estudiante", on_delete=models.PROTECT, related_name="matriculas")
    curso = models.ForeignKey(Curso, on_delete=models.PROTECT, related_name="matriculas")
    estado = models.CharField(max_length=12, choices=ESTADOS, default="activa")
    canciones = models.ManyToManyField("Cancion", through="MatriculaCancion", related_name="matriculas", blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["estudiante", "curso"],
                condition=Q(deleted_at__isnull=True),
                name="uniq_matricula_vigente",
            ),
        ]

    def __str__(self):
        return f"{self.estudiante_id} en {self.curso_id}"


class Cancion(SoftDeleteModel, TimeStampedModel):
    DIFICULTADES = [
        ("principiante", "Principiante"),
        ("intermedio", "Intermedio"),
        ("avanzado", "Avanzado"),
    ]

    academia = models.ForeignKey("academias_core.Academia", on_delete=models.PROTECT, related_name="canciones")
    titulo = models.CharField(max_length=200)
    autor = models.CharField(max_length=200, blank=True)
    dificultad = models.CharField(max_length=12, choices=DIFICULTADES, blank=True)
    notas = models.TextField(blank=True)

    class Meta:
        ordering = ["titulo"]

    def __str__(self):
        return self.titulo


class MatriculaCancion(models.Model):
    matricula = models.ForeignKey(Matricula, on_delete=models.CASCADE, related_name="vinculos_canciones")
    cancion = models.ForeignKey(Cancion, on_delete=models.CASCADE)
    creado_en = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["matricula", "cancion"], name="uniq_matricula_cancion"),
        ]
