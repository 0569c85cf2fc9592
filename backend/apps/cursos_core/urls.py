# apps/cursos_core/urls.py

from rest_framework.routers import DefaultRouter

from apps.cursos_core.views import (
    CancionViewSet,
    CursoViewSet,
    FechaPeriodoViewSet,
    HorarioViewSet,
    InscripcionViewSet,
    MateriaViewSet,
    MatriculaViewSet,
    PeriodoViewSet,
)

router = DefaultRouter()

router.register(r"materias", MateriaViewSet, basename="materias")
# Catálogo de materias de la academia

router.register(r"canciones", CancionViewSet, basename="canciones")
# Repertorio de canciones asignables a matrículas

router.register(r"periodos", PeriodoViewSet, basename="periodos")
# Períodos lectivos (año + I..VI) y sus fechas (/periodos/{id}/fechas/)

router.register(r"fechas-periodo", FechaPeriodoViewSet, basename="fechas-periodo")
# Edición / baja puntual de una fecha de período

router.register(r"cursos", CursoViewSet, basename="cursos")
# Terna profesor/materia/período con sus sesiones y turnos

router.register(r"horarios", HorarioViewSet, basename="horarios")
# Franjas semanales; inscripción en lote en /horarios/{id}/inscripciones/

router.register(r"inscripciones", InscripcionViewSet, basename="inscripciones")
# Cancelación de inscripciones

router.register(r"matriculas", MatriculaViewSet, basename="matriculas")
# Matrículas estudiante ↔ curso (+ canciones asignadas)

urlpatterns = router.urls
