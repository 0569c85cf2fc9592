# apps/contratos_core/models.py

from django.conf import settings
from django.db import models

from apps.common.models import TimeStampedModel


class Contrato(TimeStampedModel):
    """
    Acuerdo de facturación con un encargado sobre una o más matrículas.
    Al crearse genera una FacturaContrato por cada mes del rango.
    """
    TIPOS = [
        ("estandar", "Estándar"),
        ("especial", "Especial"),
        ("grupal", "Matrícula grupal"),
    ]
    ESTADOS = [
        ("activo", "Activo"),
        ("finalizado", "Finalizado"),
        ("cancelado", "Cancelado"),
    ]

    academia = models.ForeignKey("academias_core.Academia", on_delete=models.PROTECT, related_name="contratos")
    encargado = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="contratos")
    tipo = models.CharField(max_length=10, choices=TIPOS, default="estandar")
    estado = models.CharField(max_length=12, choices=ESTADOS, default="activo")
    monto_mensual = models.DecimalField(max_digits=12, decimal_places=2)
    fecha_inicio = models.DateField()
    fecha_fin = models.DateField()
    notas = models.TextField(blank=True)
    matriculas = models.ManyToManyField(
        "cursos_core.Matricula", through="ContratoMatricula", related_name="contratos", blank=True
    )
    creado_por = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )

    class Meta:
        ordering = ["-creado_en"]
        indexes = [models.Index(fields=["academia", "encargado"])]

    def __str__(self):
        return f"Contrato {self.id} · encargado {self.encargado_id}"


class ContratoMatricula(models.Model):
    contrato = models.ForeignKey(Contrato, on_delete=models.CASCADE, related_name="vinculos_matriculas")
    matricula = models.ForeignKey("cursos_core.Matricula", on_delete=models.PROTECT, related_name="vinculos_contratos")

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["contrato", "matricula"], name="uniq_contrato_matricula"),
        ]


class FacturaContrato(models.Model):
    """Cuota mensual de un contrato. `mes` es siempre el día 1 del mes facturado."""
    ESTADOS = [
        ("pendiente", "Pendiente"),
        ("pagado", "Pagado"),
    ]

    contrato = models.ForeignKey(Contrato, on_delete=models.CASCADE, related_name="facturas")
    mes = models.DateField()
    monto = models.DecimalField(max_digits=12, decimal_places=2)
    estado = models.CharField(max_length=10, choices=ESTADOS, default="pendiente")
    pagado_en = models.DateTimeField(null=True, blank=True)
    creado_en = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["mes"]
        constraints = [
            models.UniqueConstraint(fields=["contrato", "mes"], name="uniq_factura_contrato_mes"),
        ]

    def __str__(self):
        return f"{self.contrato_id} {self.mes:%Y-%m} ({self.estado})"
