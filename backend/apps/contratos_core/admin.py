from django.contrib import admin

from apps.contratos_core.models import Contrato, FacturaContrato


class FacturaContratoInline(admin.TabularInline):
    model = FacturaContrato
    extra = 0
    readonly_fields = ("mes", "monto", "pagado_en")


@admin.register(Contrato)
class ContratoAdmin(admin.ModelAdmin):
    list_display = ("id", "encargado", "tipo", "monto_mensual", "fecha_inicio", "fecha_fin", "estado")
    list_filter = ("academia", "tipo", "estado")
    search_fields = ("encargado__email", "encargado__apellido")
    inlines = [FacturaContratoInline]


@admin.register(FacturaContrato)
class FacturaContratoAdmin(admin.ModelAdmin):
    list_display = ("id", "contrato", "mes", "monto", "estado", "pagado_en")
    list_filter = ("estado",)
    ordering = ("-mes",)
