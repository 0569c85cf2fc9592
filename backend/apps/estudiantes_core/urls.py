from django.urls import path
from rest_framework.routers import DefaultRouter

from apps.estudiantes_core.views import (
    EncargadoEstudiantesView,
    EstudianteViewSet,
    HogarCursosView,
    HogarEstudiantesView,
)

router = DefaultRouter()
router.register(r"estudiantes", EstudianteViewSet, basename="estudiantes")

urlpatterns = [
    path("encargados/<int:encargado_id>/estudiantes/", EncargadoEstudiantesView.as_view(), name="encargado-estudiantes"),
    path("hogar/estudiantes/", HogarEstudiantesView.as_view(), name="hogar-estudiantes"),
    path("hogar/estudiantes/<int:estudiante_id>/cursos/", HogarCursosView.as_view(), name="hogar-cursos"),
] + router.urls
