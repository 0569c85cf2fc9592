from django.apps import AppConfig


class AuthCoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.auth_core"
