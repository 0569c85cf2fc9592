from django.apps import AppConfig


class EstudiantesCoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.estudiantes_core"
