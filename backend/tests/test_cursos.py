# backend/tests/test_cursos.py
import datetime

import pytest

from apps.common.fechas import to_time
from apps.cursos_core.models import Curso, FechaPeriodo, Horario, Periodo


def _payload(materia, profesor, **extra):
    data = {
        "anio": 2024,
        "periodo": "II",
        "materia_id": materia.id,
        "profesor_id": profesor.id,
        "turnos": [{"dia_semana": 1, "hora_inicio": "10:00", "hora_fin": "11:00"}],
        "fecha_inicio": "2024-07-01",
        "fecha_fin": "2024-07-31",
        "mensualidad": "120.00",
    }
    data.update(extra)
    return data


@pytest.mark.django_db
def test_crear_curso_genera_periodo_fechas_y_horarios(api_client, director, materia, profesor):
    resp = api_client(director).post("/api/cursos/", _payload(materia, profesor), format="json")

    assert resp.status_code == 201, resp.data
    assert resp.data["sesiones_count"] == 5
    assert resp.data["turnos_count"] == 1
    periodo = Periodo.objects.get(anio=2024, periodo="II")
    fechas = FechaPeriodo.objects.filter(periodo=periodo, tipo="clase").values_list("fecha", flat=True)
    assert sorted(f.day for f in fechas) == [1, 8, 15, 22, 29]


@pytest.mark.django_db
def test_crear_curso_con_fechas_explicitas(api_client, director, materia, profesor):
    payload = _payload(materia, profesor, fechas_sesion=["2024-08-05", "2024-08-12", "2024-08-05"])
    resp = api_client(director).post("/api/cursos/", payload, format="json")

    assert resp.status_code == 201
    assert resp.data["sesiones_count"] == 2


@pytest.mark.django_db
def test_crear_curso_fuera_de_horario_permitido(api_client, director, materia, profesor):
    payload = _payload(materia, profesor, turnos=[{"dia_semana": 2, "hora_inicio": "06:00", "hora_fin": "07:30"}])
    resp = api_client(director).post("/api/cursos/", payload, format="json")

    assert resp.status_code == 400
    assert "error" in resp.data
    assert not Curso.objects.exists()


@pytest.mark.django_db
def test_crear_curso_con_choque_del_profesor_no_persiste_nada(api_client, director, academia, materia, profesor):
    Horario.objects.create(
        academia=academia, profesor=profesor, nombre="Otro",
        dia_semana=1, hora_inicio=to_time("10:30"), hora_fin=to_time("11:30"),
    )
    resp = api_client(director).post("/api/cursos/", _payload(materia, profesor), format="json")

    assert resp.status_code == 400
    assert resp.data["error"] == "El profesor ya tiene un horario que se superpone"
    assert not Curso.objects.exists()
    assert not Periodo.objects.exists()


@pytest.mark.django_db
def test_curso_duplicado(api_client, director, materia, profesor):
    client = api_client(director)
    assert client.post("/api/cursos/", _payload(materia, profesor), format="json").status_code == 201

    otro_turno = _payload(materia, profesor, turnos=[{"dia_semana": 4, "hora_inicio": "18:00", "hora_fin": "19:00"}])
    resp = client.post("/api/cursos/", otro_turno, format="json")
    assert resp.status_code == 400
    assert resp.data["error"] == "Ya existe un curso para este profesor, materia y período"


@pytest.mark.django_db
def test_eliminar_curso_da_de_baja_horarios_y_fechas(api_client, director, curso, fechas_clase):
    Horario.objects.create(
        academia=curso.academia, profesor=curso.profesor, curso=curso, nombre="Guitarra",
        dia_semana=5, hora_inicio=to_time("17:00"), hora_fin=to_time("18:00"),
    )
    resp = api_client(director).delete(f"/api/cursos/{curso.id}/")

    assert resp.status_code == 204
    curso.refresh_from_db()
    assert curso.deleted_at is not None
    assert not Horario.objects.vigentes().filter(curso=curso).exists()
    assert not curso.fechas_clase().exists()


@pytest.mark.django_db
def test_profesor_solo_ve_sus_cursos(api_client, profesor, crear_usuario, academia, curso, materia, periodo):
    otro = crear_usuario("otro@example.com", "profesor", academia)
    Curso.objects.create(academia=academia, profesor=otro, materia=materia, periodo=periodo)

    resp = api_client(profesor).get("/api/cursos/")
    assert resp.status_code == 200
    assert [c["id"] for c in resp.data["results"]] == [curso.id]


@pytest.mark.django_db
def test_crear_horarios_con_advertencias(api_client, director, academia, profesor):
    Horario.objects.create(
        academia=academia, profesor=profesor, nombre="Existente",
        dia_semana=2, hora_inicio=to_time("09:00"), hora_fin=to_time("10:00"),
    )
    resp = api_client(director).post("/api/horarios/", {
        "profesor_id": profesor.id,
        "nombre": "Canto",
        "time_slots": [
            {"dia_semana": 2, "hora_inicio": "09:30", "hora_fin": "10:30"},
            {"dia_semana": 3, "hora_inicio": "09:30", "hora_fin": "10:30"},
        ],
    }, format="json")

    assert resp.status_code == 207
    assert len(resp.data["horarios"]) == 1
    assert resp.data["advertencias"][0]["error"].startswith("Conflicto de horario: Existente")


@pytest.mark.django_db
def test_periodo_duplicado(api_client, director, periodo):
    resp = api_client(director).post("/api/periodos/", {"anio": 2024, "periodo": "I"}, format="json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_matricula_duplicada_vigente(api_client, director, curso, estudiante):
    client = api_client(director)
    payload = {"estudiante_id": estudiante.id, "curso_id": curso.id}
    assert client.post("/api/matriculas/", payload, format="json").status_code == 201
    assert client.post("/api/matriculas/", payload, format="json").status_code == 400


@pytest.mark.django_db
def test_fecha_de_clase_requiere_materia_y_profesor():
    from apps.cursos_core.serializers import FechaPeriodoSerializer

    ser = FechaPeriodoSerializer(data={"fecha": datetime.date(2024, 3, 1), "tipo": "clase"})
    assert not ser.is_valid()
