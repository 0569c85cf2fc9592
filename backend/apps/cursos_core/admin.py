# apps/cursos_core/admin.py

from django.contrib import admin

from apps.cursos_core.models import (
    Cancion,
    Curso,
    FechaPeriodo,
    Horario,
    Inscripcion,
    Materia,
    Matricula,
    Periodo,
)


@admin.register(Materia)
class MateriaAdmin(admin.ModelAdmin):
    list_display = ("id", "nombre", "academia", "deleted_at")
    list_filter = ("academia",)
    search_fields = ("nombre",)


@admin.register(Periodo)
class PeriodoAdmin(admin.ModelAdmin):
    list_display = ("id", "academia", "anio", "periodo", "deleted_at")
    list_filter = ("academia", "anio")


@admin.register(FechaPeriodo)
class FechaPeriodoAdmin(admin.ModelAdmin):
    list_display = ("id", "periodo", "fecha", "tipo", "materia", "profesor")
    list_filter = ("tipo",)
    ordering = ("-fecha",)


@admin.register(Curso)
class CursoAdmin(admin.ModelAdmin):
    list_display = ("id", "materia", "periodo", "profesor", "mensualidad")
    list_filter = ("academia", "periodo")


@admin.register(Horario)
class HorarioAdmin(admin.ModelAdmin):
    list_display = ("id", "nombre", "profesor", "dia_semana", "hora_inicio", "hora_fin", "deleted_at")
    list_filter = ("academia", "dia_semana")


@admin.register(Inscripcion)
class InscripcionAdmin(admin.ModelAdmin):
    list_display = ("id", "estudiante", "horario", "estado", "fecha_inscripcion")
    list_filter = ("estado",)


@admin.register(Matricula)
class MatriculaAdmin(admin.ModelAdmin):
    list_display = ("id", "estudiante", "curso", "estado", "deleted_at")
    list_filter = ("academia", "estado")


@admin.register(Cancion)
class CancionAdmin(admin.ModelAdmin):
    list_display = ("id", "titulo", "autor", "dificultad", "academia")
    search_fields = ("titulo", "autor")
