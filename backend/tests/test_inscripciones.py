# backend/tests/test_inscripciones.py
import pytest

from apps.common.fechas import to_time
from apps.cursos_core.models import Horario, Inscripcion
from apps.cursos_core.services.inscripciones import MSG_DUPLICADO, inscribir_estudiantes
from apps.estudiantes_core.models import Estudiante


@pytest.fixture
def horario_lunes(academia, profesor):
    return Horario.objects.create(
        academia=academia, profesor=profesor, nombre="Guitarra A",
        dia_semana=1, hora_inicio=to_time("10:00"), hora_fin=to_time("11:00"),
    )


@pytest.fixture
def horario_pisado(academia, crear_usuario):
    otro_profe = crear_usuario("otro@example.com", "profesor", academia)
    return Horario.objects.create(
        academia=academia, profesor=otro_profe, nombre="Piano B",
        dia_semana=1, hora_inicio=to_time("10:30"), hora_fin=to_time("11:30"),
    )


@pytest.mark.django_db
def test_inscripcion_nueva_devuelve_201(horario_lunes, estudiante, hermano):
    resultado = inscribir_estudiantes(horario_lunes, [estudiante.id, hermano.id])
    assert len(resultado.inscripciones) == 2
    assert resultado.status_http() == 201
    assert Inscripcion.objects.filter(horario=horario_lunes, estado="activa").count() == 2


@pytest.mark.django_db
def test_duplicado_no_se_reporta_como_conflicto(horario_lunes, estudiante):
    inscribir_estudiantes(horario_lunes, [estudiante.id])

    resultado = inscribir_estudiantes(horario_lunes, [estudiante.id])
    assert resultado.duplicados == [{"estudiante_id": estudiante.id, "error": MSG_DUPLICADO}]
    assert resultado.conflictos == []
    assert resultado.status_http() == 400


@pytest.mark.django_db
def test_reactiva_inscripcion_cancelada(horario_lunes, estudiante):
    previa = Inscripcion.objects.create(
        estudiante=estudiante, horario=horario_lunes, profesor=horario_lunes.profesor, estado="cancelada"
    )
    resultado = inscribir_estudiantes(horario_lunes, [estudiante.id])

    assert resultado.reactivadas == [previa]
    previa.refresh_from_db()
    assert previa.estado == "activa"
    assert Inscripcion.objects.filter(estudiante=estudiante, horario=horario_lunes).count() == 1


@pytest.mark.django_db
def test_lote_parcial_con_conflicto_devuelve_207(horario_lunes, horario_pisado, estudiante, hermano):
    inscribir_estudiantes(horario_pisado, [estudiante.id])

    resultado = inscribir_estudiantes(horario_lunes, [estudiante.id, hermano.id])
    assert [i.estudiante_id for i in resultado.inscritos] == [hermano.id]
    assert resultado.conflictos[0]["estudiante_id"] == estudiante.id
    assert resultado.conflictos[0]["conflicto"] == "Conflicto de horario: Piano B (Lunes, 10:30-11:30)"
    assert resultado.status_http() == 207


@pytest.mark.django_db
def test_retirado_y_de_otra_academia_son_errores(horario_lunes, academia, otra_academia):
    retirado = Estudiante.objects.create(academia=academia, nombre="Rita", estado_inscripcion="retirado")
    ajeno = Estudiante.objects.create(academia=otra_academia, nombre="Zoe")

    resultado = inscribir_estudiantes(horario_lunes, [retirado.id, ajeno.id])
    assert [e["estudiante_id"] for e in resultado.errores] == [retirado.id, ajeno.id]
    assert not resultado.inscritos


@pytest.mark.django_db
def test_endpoint_lote_responde_207(api_client, director, horario_lunes, horario_pisado, estudiante, hermano):
    inscribir_estudiantes(horario_pisado, [estudiante.id])

    resp = api_client(director).post(
        f"/api/horarios/{horario_lunes.id}/inscripciones/",
        {"estudiante_ids": [estudiante.id, hermano.id]},
        format="json",
    )
    assert resp.status_code == 207
    assert len(resp.data["inscripciones"]) == 1
    assert len(resp.data["conflictos"]) == 1
    assert resp.data["duplicados"] == []


@pytest.mark.django_db
def test_profesor_no_puede_inscribir(api_client, profesor, horario_lunes, estudiante):
    resp = api_client(profesor).post(
        f"/api/horarios/{horario_lunes.id}/inscripciones/", {"estudiante_ids": [estudiante.id]}, format="json"
    )
    assert resp.status_code == 403


@pytest.mark.django_db
def test_cancelar_inscripcion_no_borra_la_fila(api_client, director, horario_lunes, estudiante):
    resultado = inscribir_estudiantes(horario_lunes, [estudiante.id])
    inscripcion = resultado.inscripciones[0]

    resp = api_client(director).delete(f"/api/inscripciones/{inscripcion.id}/")
    assert resp.status_code == 200
    assert resp.data["estado"] == "cancelada"
    assert Inscripcion.objects.filter(id=inscripcion.id).exists()


@pytest.fixture
def horario_mediodia(academia, crear_usuario):
    otro_profe = crear_usuario("violin@example.com", "profesor", academia)
    return Horario.objects.create(
        academia=academia, profesor=otro_profe, nombre="Violín C",
        dia_semana=1, hora_inicio=to_time("12:00"), hora_fin=to_time("13:00"),
    )


@pytest.mark.django_db
def test_mover_horario_sobre_otra_inscripcion_del_estudiante_es_400(
    api_client, director, horario_lunes, horario_mediodia, estudiante
):
    inscribir_estudiantes(horario_lunes, [estudiante.id])
    inscribir_estudiantes(horario_mediodia, [estudiante.id])

    resp = api_client(director).patch(
        f"/api/horarios/{horario_mediodia.id}/",
        {"hora_inicio": "10:30", "hora_fin": "11:30"},
        format="json",
    )
    assert resp.status_code == 400
    assert resp.data["error"] == "El cambio genera superposición para estudiantes inscriptos"
    assert resp.data["details"][0]["estudiante_id"] == estudiante.id
    assert resp.data["details"][0]["conflictos"] == ["Conflicto de horario: Guitarra A (Lunes, 10:00-11:00)"]

    horario_mediodia.refresh_from_db()
    assert horario_mediodia.hora_inicio == to_time("12:00")
    assert horario_mediodia.hora_fin == to_time("13:00")


@pytest.mark.django_db
def test_mover_horario_sin_choques_de_estudiantes(api_client, director, horario_lunes, horario_mediodia, estudiante):
    inscribir_estudiantes(horario_lunes, [estudiante.id])
    inscribir_estudiantes(horario_mediodia, [estudiante.id])

    # 11:00 es el fin de Guitarra A: intervalos semiabiertos, no chocan
    resp = api_client(director).patch(
        f"/api/horarios/{horario_mediodia.id}/",
        {"hora_inicio": "11:00", "hora_fin": "12:00"},
        format="json",
    )
    assert resp.status_code == 200
    horario_mediodia.refresh_from_db()
    assert horario_mediodia.hora_inicio == to_time("11:00")


@pytest.mark.django_db
def test_mover_horario_ignora_inscripciones_canceladas(api_client, director, horario_lunes, horario_mediodia, estudiante):
    inscribir_estudiantes(horario_lunes, [estudiante.id])
    Inscripcion.objects.create(
        estudiante=estudiante, horario=horario_mediodia, profesor=horario_mediodia.profesor, estado="cancelada"
    )

    resp = api_client(director).patch(
        f"/api/horarios/{horario_mediodia.id}/", {"hora_inicio": "10:30", "hora_fin": "11:30"}, format="json"
    )
    assert resp.status_code == 200
