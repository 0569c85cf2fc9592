from django.contrib import admin

from apps.academias_core.models import Academia, AcademiaDominio


class AcademiaDominioInline(admin.TabularInline):
    model = AcademiaDominio
    extra = 0


@admin.register(Academia)
class AcademiaAdmin(admin.ModelAdmin):
    list_display = ("id", "nombre", "estado", "deleted_at")
    list_filter = ("estado",)
    search_fields = ("nombre",)
    inlines = [AcademiaDominioInline]
