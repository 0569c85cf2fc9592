# apps/cursos_core/filters.py

import django_filters

from apps.cursos_core.models import Curso, Horario, Matricula


class MatriculaFilter(django_filters.FilterSet):
    estudiante_id = django_filters.NumberFilter(field_name="estudiante_id")
    curso_id = django_filters.NumberFilter(field_name="curso_id")
    periodo_id = django_filters.NumberFilter(field_name="curso__periodo_id")
    materia_id = django_filters.NumberFilter(field_name="curso__materia_id")
    profesor_id = django_filters.NumberFilter(field_name="curso__profesor_id")

    class Meta:
        model = Matricula
        fields = ["estado", "estudiante_id", "curso_id", "periodo_id", "materia_id", "profesor_id"]


class HorarioFilter(django_filters.FilterSet):
    profesor_id = django_filters.NumberFilter(field_name="profesor_id")
    periodo_id = django_filters.NumberFilter(field_name="periodo_id")
    curso_id = django_filters.NumberFilter(field_name="curso_id")

    class Meta:
        model = Horario
        fields = ["dia_semana", "profesor_id", "periodo_id", "curso_id"]


class CursoFilter(django_filters.FilterSet):
    periodo_id = django_filters.NumberFilter(field_name="periodo_id")
    profesor_id = django_filters.NumberFilter(field_name="profesor_id")
    materia_id = django_filters.NumberFilter(field_name="materia_id")
    anio = django_filters.NumberFilter(field_name="periodo__anio")

    class Meta:
        model = Curso
        fields = ["periodo_id", "profesor_id", "materia_id", "anio"]
