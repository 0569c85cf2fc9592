# apps/auth_core/urls.py
from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from .views import EncargadoViewSet, LoginView, MiPerfilView, ProfesorViewSet

router = DefaultRouter()
router.register(r"profesores", ProfesorViewSet, basename="profesores")
router.register(r"encargados", EncargadoViewSet, basename="encargados")

urlpatterns = [
    path("yo/", MiPerfilView.as_view(), name="yo"),
    path("token/", LoginView.as_view(), name="token_obtain"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("", include(router.urls)),
]
