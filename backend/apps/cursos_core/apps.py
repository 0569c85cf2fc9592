from django.apps import AppConfig


class CursosCoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.cursos_core"
