from django.apps import AppConfig


class ContratosCoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.contratos_core"
