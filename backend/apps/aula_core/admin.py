from django.contrib import admin

from apps.aula_core.models import (
    Asistencia,
    Escala,
    EvaluacionCancion,
    Insignia,
    InsigniaEstudiante,
    Rubrica,
)


@admin.register(Asistencia)
class AsistenciaAdmin(admin.ModelAdmin):
    list_display = ("id", "matricula", "fecha_periodo", "estado")
    list_filter = ("estado",)


@admin.register(Rubrica)
class RubricaAdmin(admin.ModelAdmin):
    list_display = ("id", "nombre", "academia", "orden", "por_defecto")


@admin.register(Escala)
class EscalaAdmin(admin.ModelAdmin):
    list_display = ("id", "nombre", "valor", "academia")


@admin.register(EvaluacionCancion)
class EvaluacionCancionAdmin(admin.ModelAdmin):
    list_display = ("id", "matricula", "cancion", "rubrica", "escala")


@admin.register(Insignia)
class InsigniaAdmin(admin.ModelAdmin):
    list_display = ("id", "nombre", "academia", "activo")


@admin.register(InsigniaEstudiante)
class InsigniaEstudianteAdmin(admin.ModelAdmin):
    list_display = ("id", "estudiante", "insignia", "otorgada_en")
