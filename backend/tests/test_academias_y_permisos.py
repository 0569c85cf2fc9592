# backend/tests/test_academias_y_permisos.py
from types import SimpleNamespace

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework import status

from apps.academias_core.models import AcademiaDominio
from apps.common.exceptions import manejador_excepciones
from apps.common.permissions import EsDeSuAcademia
from apps.estudiantes_core.models import EncargadoEstudiante, Estudiante

User = get_user_model()


@pytest.fixture(autouse=True)
def limpiar_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.mark.django_db
def test_super_admin_crea_academia_con_director(api_client, super_admin):
    resp = api_client(super_admin).post("/api/academias/", {
        "nombre": "Academia Norte",
        "director_email": "Directora@Norte.com",
        "director_nombre": "Marta",
        "director_password": "secreta123",
    }, format="json")

    assert resp.status_code == 201, resp.data
    director = User.objects.get(email="directora@norte.com")
    assert director.rol == "director"
    assert director.academia_id == resp.data["id"]


@pytest.mark.django_db
def test_director_no_administra_academias(api_client, director):
    assert api_client(director).get("/api/academias/").status_code == 403


@pytest.mark.django_db
def test_usuario_sin_academia_no_se_guarda(academia):
    with pytest.raises(ValueError):
        User.objects.create_user(email="x@example.com", password="pass1234", nombre="X", rol="profesor")


@pytest.mark.django_db
def test_login_agrega_rol_y_academia(api_client, director):
    resp = api_client().post("/api/auth/token/", {"email": director.email, "password": "pass1234"}, format="json")
    assert resp.status_code == 200
    assert resp.data["rol"] == "director"
    assert resp.data["academia_id"] == director.academia_id
    assert "access" in resp.data


@pytest.mark.django_db
def test_login_con_academia_inactiva(api_client, director, academia):
    academia.estado = "inactivo"
    academia.save(update_fields=["estado"])
    resp = api_client().post("/api/auth/token/", {"email": director.email, "password": "pass1234"}, format="json")
    assert resp.status_code == 401


def _token(api_client, usuario):
    resp = api_client().post("/api/auth/token/", {"email": usuario.email, "password": "pass1234"}, format="json")
    assert resp.status_code == 200
    return resp.data["access"]


@pytest.mark.django_db
def test_token_vigente_autoriza(api_client, director, estudiante):
    client = api_client()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {_token(api_client, director)}")
    assert client.get("/api/estudiantes/").status_code == 200


@pytest.mark.django_db
def test_token_con_rol_desactualizado_es_401(api_client, director, estudiante):
    access = _token(api_client, director)
    director.rol = "profesor"
    director.save(update_fields=["rol"])

    client = api_client()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
    resp = client.get("/api/estudiantes/")
    assert resp.status_code == status.HTTP_401_UNAUTHORIZED
    assert resp.data == {"error": "El rol cambió, iniciá sesión nuevamente"}


@pytest.mark.django_db
def test_director_solo_ve_estudiantes_de_su_academia(api_client, director, estudiante, otra_academia):
    ajeno = Estudiante.objects.create(academia=otra_academia, nombre="Zoe")
    client = api_client(director)

    resp = client.get("/api/estudiantes/")
    assert [e["id"] for e in resp.data["results"]] == [estudiante.id]
    assert client.get(f"/api/estudiantes/{ajeno.id}/").status_code == 404


@pytest.mark.django_db
def test_host_de_otra_academia_es_tenant_mismatch(api_client, director, otra_academia):
    AcademiaDominio.objects.create(academia=otra_academia, hostname="luna.example.com")

    resp = api_client(director).get("/api/estudiantes/", HTTP_HOST="luna.example.com")
    assert resp.status_code == 403
    assert resp.data == {"error": "tenant_mismatch"}


@pytest.mark.django_db
def test_tenant_config_por_hostname(api_client, academia):
    AcademiaDominio.objects.create(academia=academia, hostname="sol.example.com")

    resp = api_client().get("/api/tenant/config/", HTTP_HOST="sol.example.com")
    assert resp.status_code == 200
    assert resp.data["id"] == academia.id

    resp = api_client().get("/api/tenant/config/", HTTP_HOST="desconocido.example.com")
    assert resp.data["default"] is True


@pytest.mark.django_db
def test_profesor_lee_pero_no_crea_estudiantes(api_client, profesor, estudiante):
    client = api_client(profesor)
    assert client.get("/api/estudiantes/").status_code == 200
    assert client.post("/api/estudiantes/", {"nombre": "Nuevo"}, format="json").status_code == 403


@pytest.mark.django_db
def test_encargado_no_accede_al_listado(api_client, encargado):
    assert api_client(encargado).get("/api/estudiantes/").status_code == 403


@pytest.mark.django_db
def test_eliminar_estudiante_es_baja_logica(api_client, director, estudiante):
    resp = api_client(director).delete(f"/api/estudiantes/{estudiante.id}/")
    assert resp.status_code == 204
    estudiante.refresh_from_db()
    assert estudiante.deleted_at is not None


@pytest.mark.django_db
def test_vincular_encargado_201_y_luego_200(api_client, director, encargado, academia):
    nuevo = Estudiante.objects.create(academia=academia, nombre="Bruno")
    client = api_client(director)
    url = f"/api/encargados/{encargado.id}/estudiantes/"

    assert client.post(url, {"estudiante_id": nuevo.id, "relacion": "padre"}, format="json").status_code == 201
    assert client.post(url, {"estudiante_id": nuevo.id, "relacion": "tutor"}, format="json").status_code == 200
    assert EncargadoEstudiante.objects.get(encargado=encargado, estudiante=nuevo).relacion == "tutor"


@pytest.mark.django_db
def test_hogar_lista_solo_los_hijos(api_client, encargado, estudiante, academia):
    Estudiante.objects.create(academia=academia, nombre="Otro")
    resp = api_client(encargado).get("/api/hogar/estudiantes/")
    assert resp.status_code == 200
    assert [e["id"] for e in resp.data] == [estudiante.id]


@pytest.mark.django_db
def test_sin_autenticar_responde_con_formato_de_error(api_client):
    resp = api_client().get("/api/estudiantes/")
    assert resp.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)
    assert set(resp.data) == {"error"}


def test_error_no_controlado_es_500_con_mensaje():
    resp = manejador_excepciones(RuntimeError("se cayó la base"), {"view": None})
    assert resp.status_code == 500
    assert resp.data == {"error": "Ocurrió un error inesperado", "details": "se cayó la base"}


@pytest.mark.django_db
def test_errores_de_serializer_van_en_details(api_client, director):
    resp = api_client(director).post("/api/cursos/", {"anio": 1900}, format="json")
    assert resp.status_code == 400
    assert resp.data["error"] == "Datos inválidos"
    assert "anio" in resp.data["details"]


@pytest.mark.django_db
def test_bootstrap_es_idempotente():
    from io import StringIO

    from django.core.management import call_command

    from apps.aula_core.models import Escala, Rubrica

    for _ in range(2):
        call_command("bootstrap_academia", "--skip-migrate", "--domains", "localhost,demo.local", stdout=StringIO())

    assert User.objects.filter(rol="director").count() == 1
    assert AcademiaDominio.objects.get(hostname="localhost").is_primary
    assert Rubrica.objects.count() == 4
    assert Escala.objects.count() == 4


@pytest.mark.django_db
@pytest.mark.parametrize("usuario_fixture, de_la_misma, esperado", [
    ("director", True, True),
    ("director", False, False),
    ("profesor", False, False),
    ("super_admin", False, True),
])
def test_objeto_de_su_academia(request, usuario_fixture, de_la_misma, esperado, academia, otra_academia):
    usuario = request.getfixturevalue(usuario_fixture)
    obj = SimpleNamespace(academia_id=academia.id if de_la_misma else otra_academia.id)
    req = SimpleNamespace(user=usuario, META={})
    assert EsDeSuAcademia().has_object_permission(req, None, obj) is esperado


@pytest.mark.django_db
def test_objeto_sin_academia_no_pasa(director):
    req = SimpleNamespace(user=director, META={})
    assert EsDeSuAcademia().has_object_permission(req, None, SimpleNamespace()) is False
