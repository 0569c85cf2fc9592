from django.contrib import admin

from apps.estudiantes_core.models import EncargadoEstudiante, Estudiante


@admin.register(Estudiante)
class EstudianteAdmin(admin.ModelAdmin):
    list_display = ("id", "nombre", "apellido", "academia", "estado_inscripcion", "deleted_at")
    list_filter = ("academia", "estado_inscripcion")
    search_fields = ("nombre", "apellido", "email")


@admin.register(EncargadoEstudiante)
class EncargadoEstudianteAdmin(admin.ModelAdmin):
    list_display = ("encargado", "estudiante", "relacion")
    search_fields = ("encargado__email", "estudiante__nombre")
