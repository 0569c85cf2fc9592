# apps/common/permissions.py

from rest_framework import permissions

from apps.auth_core.utils import get_rol_actual


class EsSuperAdmin(permissions.BasePermission):
    def has_permission(self, request, view):
        return request.user.is_authenticated and get_rol_actual(request) == "super_admin"


class EsDirector(permissions.BasePermission):
    """Director de la academia (el super_admin también pasa)."""
    def has_permission(self, request, view):
        return request.user.is_authenticated and get_rol_actual(request) in ("director", "super_admin")


class EsDirectorOProfesor(permissions.BasePermission):
    def has_permission(self, request, view):
        return request.user.is_authenticated and get_rol_actual(request) in ("director", "profesor", "super_admin")


class EsEncargado(permissions.BasePermission):
    def has_permission(self, request, view):
        return request.user.is_authenticated and get_rol_actual(request) == "encargado"


class EsDeSuAcademia(permissions.BasePermission):
    """
    Permite acceso si el objeto pertenece a la misma academia que el usuario autenticado.
    """
    def has_object_permission(self, request, view, obj):
        if get_rol_actual(request) == "super_admin":
            return True
        academia_id = getattr(obj, "academia_id", None)
        return academia_id is not None and academia_id == request.user.academia_id


class LecturaProfesorEscrituraDirector(permissions.BasePermission):
    """
    - GET para director, profesor y super_admin.
    - Escritura solo para director y super_admin.
    """

    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False
        rol = get_rol_actual(request)
        if request.method in permissions.SAFE_METHODS:
            return rol in ("director", "profesor", "super_admin")
        return rol in ("director", "super_admin")
