# academia_core/urls.py

from django.contrib import admin
from django.urls import include, path
from drf_yasg import openapi
from drf_yasg.views import get_schema_view
from rest_framework import permissions

schema_view = get_schema_view(
    openapi.Info(
        title="API Academias",
        default_version="v1",
        description="Administración de academias de música",
    ),
    public=True,
    permission_classes=[permissions.AllowAny],
    authentication_classes=[],
)

urlpatterns = [
    path("api/schema/", schema_view.without_ui(cache_timeout=0), name="schema-json"),
    path("docs/", schema_view.with_ui("swagger", cache_timeout=0), name="swagger-ui"),

    path("admin/", admin.site.urls),

    path("api/auth/", include("apps.auth_core.urls")),
    path("api/", include("apps.academias_core.urls")),
    path("api/", include("apps.estudiantes_core.urls")),
    # contratos antes que cursos: /contratos/... no debe caer en otro router
    path("api/", include("apps.contratos_core.urls")),
    path("api/", include("apps.cursos_core.urls")),
    path("api/", include("apps.aula_core.urls")),
]
