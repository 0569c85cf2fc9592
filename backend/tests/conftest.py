# backend/tests/conftest.py
import datetime
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from apps.academias_core.models import Academia
from apps.cursos_core.models import Curso, FechaPeriodo, Materia, Periodo, ProfesorMateria
from apps.estudiantes_core.models import EncargadoEstudiante, Estudiante

User = get_user_model()


@pytest.fixture
def academia(db):
    return Academia.objects.create(nombre="Academia Sol")


@pytest.fixture
def otra_academia(db):
    return Academia.objects.create(nombre="Academia Luna")


@pytest.fixture
def crear_usuario(db):
    def _crear(email, rol, academia=None, **extra):
        return User.objects.create_user(
            email=email, password="pass1234", nombre=email.split("@")[0], rol=rol, academia=academia, **extra
        )
    return _crear


@pytest.fixture
def super_admin(crear_usuario):
    return crear_usuario("root@example.com", "super_admin")


@pytest.fixture
def director(crear_usuario, academia):
    return crear_usuario("director@example.com", "director", academia)


@pytest.fixture
def profesor(crear_usuario, academia):
    return crear_usuario("profe@example.com", "profesor", academia)


@pytest.fixture
def encargado(crear_usuario, academia):
    return crear_usuario("madre@example.com", "encargado", academia)


@pytest.fixture
def estudiante(academia, encargado):
    e = Estudiante.objects.create(academia=academia, nombre="Ana", apellido="Pérez")
    EncargadoEstudiante.objects.create(encargado=encargado, estudiante=e, relacion="madre")
    return e


@pytest.fixture
def hermano(academia, encargado):
    e = Estudiante.objects.create(academia=academia, nombre="Luis", apellido="Pérez")
    EncargadoEstudiante.objects.create(encargado=encargado, estudiante=e, relacion="madre")
    return e


@pytest.fixture
def materia(academia, profesor):
    m = Materia.objects.create(academia=academia, nombre="Guitarra")
    ProfesorMateria.objects.create(profesor=profesor, materia=m)
    return m


@pytest.fixture
def periodo(academia):
    return Periodo.objects.create(academia=academia, anio=2024, periodo="I")


@pytest.fixture
def curso(academia, profesor, materia, periodo):
    return Curso.objects.create(
        academia=academia, profesor=profesor, materia=materia, periodo=periodo, mensualidad=Decimal("100.00")
    )


@pytest.fixture
def fechas_clase(curso):
    """Clases del 15/03 al 10/06 de 2024 (cuatro meses calendario)."""
    return [
        FechaPeriodo.objects.create(
            periodo=curso.periodo, fecha=f, tipo="clase", materia=curso.materia, profesor=curso.profesor
        )
        for f in (datetime.date(2024, 3, 15), datetime.date(2024, 4, 20), datetime.date(2024, 6, 10))
    ]


@pytest.fixture
def api_client():
    def _client(usuario=None):
        client = APIClient()
        if usuario is not None:
            client.force_authenticate(user=usuario)
        return client
    return _client
