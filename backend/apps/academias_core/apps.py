from django.apps import AppConfig


class AcademiasCoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.academias_core"
