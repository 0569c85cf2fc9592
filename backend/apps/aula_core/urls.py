# apps/aula_core/urls.py
from django.urls import path
from rest_framework.routers import DefaultRouter

from apps.aula_core.views import (
    AsistenciaView,
    ComentarioView,
    DatosEvaluacionView,
    EvaluacionCancionView,
    HogarProgresoView,
    InsigniaEstudianteView,
    InsigniaViewSet,
    TareaView,
)

router = DefaultRouter()
router.register(r"aula/insignias", InsigniaViewSet, basename="insignias")

urlpatterns = [
    # Registros por matrícula + fecha de clase (GET / PUT upsert / DELETE)
    path("aula/asistencias/", AsistenciaView.as_view(), name="aula-asistencias"),
    path("aula/tareas/", TareaView.as_view(), name="aula-tareas"),
    path("aula/comentarios/", ComentarioView.as_view(), name="aula-comentarios"),
    path("aula/evaluaciones/", EvaluacionCancionView.as_view(), name="aula-evaluaciones"),
    path("aula/datos-evaluacion/", DatosEvaluacionView.as_view(), name="aula-datos-evaluacion"),
    path("aula/insignias-estudiante/", InsigniaEstudianteView.as_view(), name="aula-insignias-estudiante"),
    path(
        "hogar/estudiantes/<int:estudiante_id>/cursos/<int:matricula_id>/progreso/",
        HogarProgresoView.as_view(),
        name="hogar-progreso",
    ),
] + router.urls
