from django.apps import AppConfig


class AulaCoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.aula_core"
