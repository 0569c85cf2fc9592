from django.contrib import admin

from apps.auth_core.models import Usuario


@admin.register(Usuario)
class UsuarioAdmin(admin.ModelAdmin):
    list_display = ("id", "email", "nombre", "apellido", "rol", "academia", "estado")
    list_filter = ("rol", "estado", "academia")
    search_fields = ("email", "nombre", "apellido")
    ordering = ("email",)
    exclude = ("password", "groups", "user_permissions")
