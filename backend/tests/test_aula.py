# backend/tests/test_aula.py
import pytest

from apps.aula_core.models import Asistencia, Escala, EvaluacionCancion, Insignia, Rubrica
from apps.cursos_core.models import Cancion, FechaPeriodo, Matricula, Periodo


@pytest.fixture
def matricula(academia, estudiante, curso):
    return Matricula.objects.create(academia=academia, estudiante=estudiante, curso=curso)


@pytest.fixture
def clase(fechas_clase):
    return fechas_clase[0]


@pytest.mark.django_db
def test_asistencia_upsert(api_client, profesor, matricula, clase):
    client = api_client(profesor)
    payload = {"matricula_id": matricula.id, "fecha_periodo_id": clase.id, "estado": "presente"}

    alta = client.put("/api/aula/asistencias/", payload, format="json")
    assert alta.status_code == 201, alta.data

    payload["estado"] = "tardanza"
    cambio = client.put("/api/aula/asistencias/", payload, format="json")
    assert cambio.status_code == 200
    assert cambio.data["id"] == alta.data["id"]
    assert Asistencia.objects.get().estado == "tardanza"


@pytest.mark.django_db
def test_asistencia_fecha_de_otro_periodo(api_client, director, academia, matricula):
    otro = Periodo.objects.create(academia=academia, anio=2024, periodo="III")
    fecha = FechaPeriodo.objects.create(periodo=otro, fecha="2024-09-02", tipo="otro")

    resp = api_client(director).put("/api/aula/asistencias/", {
        "matricula_id": matricula.id, "fecha_periodo_id": fecha.id, "estado": "ausente",
    }, format="json")
    assert resp.status_code == 400
    assert resp.data["error"] == "La fecha no pertenece al período del curso"


@pytest.mark.django_db
def test_profesor_ajeno_no_registra(api_client, crear_usuario, academia, matricula, clase):
    otro = crear_usuario("otro@example.com", "profesor", academia)
    resp = api_client(otro).put("/api/aula/tareas/", {
        "matricula_id": matricula.id, "fecha_periodo_id": clase.id, "texto": "Escalas",
    }, format="json")
    assert resp.status_code == 403


@pytest.mark.django_db
def test_tarea_listar_y_borrar(api_client, profesor, matricula, clase):
    client = api_client(profesor)
    client.put("/api/aula/tareas/", {
        "matricula_id": matricula.id, "fecha_periodo_id": clase.id, "texto": "Practicar acordes",
    }, format="json")

    listado = client.get(f"/api/aula/tareas/?fecha_periodo_id={clase.id}")
    assert [t["texto"] for t in listado.data] == ["Practicar acordes"]

    borrado = client.delete(f"/api/aula/tareas/?matricula_id={matricula.id}&fecha_periodo_id={clase.id}")
    assert borrado.status_code == 204
    assert client.delete(f"/api/aula/tareas/?matricula_id={matricula.id}&fecha_periodo_id={clase.id}").status_code == 404


@pytest.mark.django_db
def test_listado_sin_filtros_es_400(api_client, profesor):
    assert api_client(profesor).get("/api/aula/comentarios/").status_code == 400


@pytest.mark.django_db
def test_evaluacion_sin_calificar_y_calificada(api_client, profesor, academia, matricula, clase):
    cancion = Cancion.objects.create(academia=academia, titulo="Zamba de mi esperanza")
    rubrica = Rubrica.objects.create(academia=academia, nombre="Ritmo")
    escala = Escala.objects.create(academia=academia, nombre="Logrado", valor=3)
    client = api_client(profesor)
    base = {
        "matricula_id": matricula.id, "fecha_periodo_id": clase.id,
        "cancion_id": cancion.id, "rubrica_id": rubrica.id,
    }

    assert client.put("/api/aula/evaluaciones/", {**base, "escala_id": None}, format="json").status_code == 201
    resp = client.put("/api/aula/evaluaciones/", {**base, "escala_id": escala.id}, format="json")
    assert resp.status_code == 200
    assert EvaluacionCancion.objects.get().escala_id == escala.id


@pytest.mark.django_db
def test_evaluacion_con_escala_de_otra_academia(api_client, profesor, academia, otra_academia, matricula, clase):
    cancion = Cancion.objects.create(academia=academia, titulo="Alfonsina y el mar")
    rubrica = Rubrica.objects.create(academia=academia, nombre="Afinación")
    ajena = Escala.objects.create(academia=otra_academia, nombre="10", valor=10)

    resp = api_client(profesor).put("/api/aula/evaluaciones/", {
        "matricula_id": matricula.id, "fecha_periodo_id": clase.id,
        "cancion_id": cancion.id, "rubrica_id": rubrica.id, "escala_id": ajena.id,
    }, format="json")
    assert resp.status_code == 404


@pytest.mark.django_db
def test_datos_evaluacion_prefiere_rubricas_de_la_materia(api_client, profesor, academia, materia):
    Rubrica.objects.create(academia=academia, nombre="General", por_defecto=True)
    propia = Rubrica.objects.create(academia=academia, nombre="Digitación", por_defecto=False)
    propia.materias.create(materia=materia)

    resp = api_client(profesor).get(f"/api/aula/datos-evaluacion/?materia_id={materia.id}")
    assert [r["nombre"] for r in resp.data["rubricas"]] == ["Digitación"]

    resp = api_client(profesor).get("/api/aula/datos-evaluacion/")
    assert [r["nombre"] for r in resp.data["rubricas"]] == ["General"]


@pytest.mark.django_db
def test_insignia_repetida_es_409(api_client, profesor, academia, estudiante):
    insignia = Insignia.objects.create(academia=academia, nombre="Primer recital")
    client = api_client(profesor)
    payload = {"estudiante_id": estudiante.id, "insignia_id": insignia.id}

    assert client.post("/api/aula/insignias-estudiante/", payload, format="json").status_code == 201
    resp = client.post("/api/aula/insignias-estudiante/", payload, format="json")
    assert resp.status_code == 409
    assert resp.data == {"error": "El estudiante ya tiene esta insignia"}


@pytest.mark.django_db
def test_progreso_para_el_encargado(api_client, profesor, encargado, estudiante, matricula, fechas_clase):
    client = api_client(profesor)
    for clase, estado in zip(fechas_clase, ("presente", "presente", "ausente")):
        client.put("/api/aula/asistencias/", {
            "matricula_id": matricula.id, "fecha_periodo_id": clase.id, "estado": estado,
        }, format="json")

    resp = api_client(encargado).get(f"/api/hogar/estudiantes/{estudiante.id}/cursos/{matricula.id}/progreso/")
    assert resp.status_code == 200
    assert resp.data["asistencia"] == {"presente": 2, "ausente": 1, "tardanza": 0, "justificado": 0}


@pytest.mark.django_db
def test_progreso_de_hijo_ajeno(api_client, crear_usuario, academia, estudiante, matricula):
    otro = crear_usuario("padre@example.com", "encargado", academia)
    resp = api_client(otro).get(f"/api/hogar/estudiantes/{estudiante.id}/cursos/{matricula.id}/progreso/")
    assert resp.status_code == 404
