# backend/tests/test_contratos.py
import datetime
from decimal import Decimal
from unittest import mock

import pytest
from django.db import DatabaseError

from apps.contratos_core.models import Contrato, ContratoMatricula, FacturaContrato
from apps.contratos_core.services import facturacion
from apps.contratos_core.services.facturacion import crear_contrato, estado_visible, planificar_facturas
from apps.cursos_core.models import Curso, Matricula
from apps.estudiantes_core.models import EncargadoEstudiante, Estudiante


@pytest.fixture
def matricula(academia, estudiante, curso):
    return Matricula.objects.create(academia=academia, estudiante=estudiante, curso=curso)


def test_planificar_facturas_una_por_mes():
    facturas = planificar_facturas(datetime.date(2024, 3, 15), datetime.date(2024, 6, 10), Decimal("150"))
    assert [f["mes"].month for f in facturas] == [3, 4, 5, 6]
    assert all(f["estado"] == "pendiente" and f["monto"] == Decimal("150") for f in facturas)


def test_estado_visible_atrasado_solo_si_vencio_el_mes():
    factura = FacturaContrato(mes=datetime.date(2024, 3, 1), estado="pendiente", monto=Decimal("10"))
    assert estado_visible(factura, hoy=datetime.date(2024, 3, 31)) == "pendiente"
    assert estado_visible(factura, hoy=datetime.date(2024, 4, 1)) == "atrasado"

    factura.estado = "pagado"
    assert estado_visible(factura, hoy=datetime.date(2025, 1, 1)) == "pagado"


@pytest.mark.django_db
def test_crear_contrato_genera_facturas(api_client, director, encargado, matricula):
    resp = api_client(director).post("/api/contratos/", {
        "encargado_id": encargado.id,
        "matricula_ids": [matricula.id],
        "monto_mensual": "150.00",
        "fecha_inicio": "2024-03-15",
        "fecha_fin": "2024-06-10",
    }, format="json")

    assert resp.status_code == 201, resp.data
    assert resp.data["facturas_creadas"] == 4
    contrato = Contrato.objects.get(id=resp.data["id"])
    assert list(contrato.matriculas.all()) == [matricula]
    assert [f.mes for f in contrato.facturas.all()] == [datetime.date(2024, m, 1) for m in (3, 4, 5, 6)]


@pytest.mark.django_db
def test_crear_contrato_con_matricula_ajena_al_encargado(api_client, director, crear_usuario, academia, matricula):
    otro = crear_usuario("padre@example.com", "encargado", academia)
    resp = api_client(director).post("/api/contratos/", {
        "encargado_id": otro.id,
        "matricula_ids": [matricula.id],
        "monto_mensual": "150.00",
        "fecha_inicio": "2024-03-15",
        "fecha_fin": "2024-06-10",
    }, format="json")

    assert resp.status_code == 400
    assert resp.data["details"] == {"matricula_ids": [matricula.id]}
    assert not Contrato.objects.exists()


@pytest.mark.django_db
def test_falla_en_facturas_no_deja_contrato(academia, encargado, matricula, director):
    with mock.patch.object(facturacion, "planificar_facturas", side_effect=DatabaseError("boom")):
        with pytest.raises(DatabaseError):
            crear_contrato(
                academia, encargado, [matricula],
                monto_mensual=Decimal("100"),
                fecha_inicio=datetime.date(2024, 3, 1),
                fecha_fin=datetime.date(2024, 4, 30),
                creado_por=director,
            )

    assert not Contrato.objects.exists()
    assert not ContratoMatricula.objects.exists()


@pytest.mark.django_db
def test_contrato_especial_toma_rango_de_las_clases(api_client, director, encargado, estudiante, curso, fechas_clase):
    resp = api_client(director).post("/api/contratos/especial/", {
        "encargado_id": encargado.id,
        "items": [
            {"estudiante_id": estudiante.id, "curso_id": curso.id},
            {"estudiante_id": estudiante.id, "curso_id": curso.id},
        ],
        "monto_mensual": "90.00",
    }, format="json")

    assert resp.status_code == 201, resp.data
    assert resp.data["tipo"] == "especial"
    assert resp.data["fecha_inicio"] == "2024-03-15"
    assert resp.data["fecha_fin"] == "2024-06-10"
    assert resp.data["facturas_creadas"] == 4
    assert Matricula.objects.filter(estudiante=estudiante, curso=curso).count() == 1


@pytest.mark.django_db
def test_contrato_especial_sin_fechas_no_persiste_nada(api_client, director, encargado, estudiante, curso):
    resp = api_client(director).post("/api/contratos/especial/", {
        "encargado_id": encargado.id,
        "items": [{"estudiante_id": estudiante.id, "curso_id": curso.id}],
        "monto_mensual": "90.00",
    }, format="json")

    assert resp.status_code == 400
    assert resp.data["error"] == "Los cursos seleccionados no tienen fechas de clase"
    assert not Contrato.objects.exists()
    assert not Matricula.objects.exists()


@pytest.mark.django_db
def test_matricula_grupal_un_contrato_por_encargado(
    api_client, director, academia, crear_usuario, estudiante, hermano, curso, fechas_clase
):
    padre = crear_usuario("padre@example.com", "encargado", academia)
    otro_hijo = Estudiante.objects.create(academia=academia, nombre="Tomás")
    EncargadoEstudiante.objects.create(encargado=padre, estudiante=otro_hijo)

    resp = api_client(director).post("/api/contratos/matricula-grupal/", {
        "curso_id": curso.id,
        "estudiante_ids": [estudiante.id, hermano.id, otro_hijo.id],
    }, format="json")

    assert resp.status_code == 201, resp.data
    assert len(resp.data["matriculas"]) == 3
    montos = sorted(Decimal(c["monto_mensual"]) for c in resp.data["contratos"])
    assert montos == [Decimal("100.00"), Decimal("200.00")]
    assert FacturaContrato.objects.count() == 8


@pytest.mark.django_db
def test_matricula_grupal_rechaza_todo_si_alguno_falla(api_client, director, academia, estudiante, curso, fechas_clase):
    huerfano = Estudiante.objects.create(academia=academia, nombre="Sin Encargado")

    resp = api_client(director).post("/api/contratos/matricula-grupal/", {
        "curso_id": curso.id,
        "estudiante_ids": [estudiante.id, huerfano.id],
    }, format="json")

    assert resp.status_code == 400
    assert resp.data["details"] == [{"estudiante_id": huerfano.id, "error": "El estudiante no tiene encargado"}]
    assert not Matricula.objects.exists()
    assert not Contrato.objects.exists()


@pytest.mark.django_db
def test_matricula_grupal_sin_mensualidad(api_client, director, estudiante, curso, fechas_clase):
    Curso.objects.filter(id=curso.id).update(mensualidad=None)
    resp = api_client(director).post("/api/contratos/matricula-grupal/", {
        "curso_id": curso.id, "estudiante_ids": [estudiante.id],
    }, format="json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_rango_fechas_sugerido(api_client, director, matricula, fechas_clase):
    resp = api_client(director).post("/api/contratos/rango-fechas/", {"matricula_ids": [matricula.id]}, format="json")
    assert resp.status_code == 200
    assert resp.data == {"fecha_inicio": datetime.date(2024, 3, 15), "fecha_fin": datetime.date(2024, 6, 10)}


@pytest.fixture
def contrato(academia, encargado, matricula, director):
    return crear_contrato(
        academia, encargado, [matricula],
        monto_mensual=Decimal("100"),
        fecha_inicio=datetime.date(2024, 3, 1),
        fecha_fin=datetime.date(2024, 4, 30),
        creado_por=director,
    )


@pytest.mark.django_db
def test_marcar_pagada_es_idempotente(api_client, director, contrato):
    factura = contrato.facturas.first()
    client = api_client(director)
    url = f"/api/contratos/{contrato.id}/facturas/{factura.id}/"

    primera = client.patch(url, {"estado": "pagado"}, format="json")
    assert primera.status_code == 200
    assert primera.data["estado"] == "pagado"
    assert "mensaje" not in primera.data

    segunda = client.patch(url, {"estado": "pagado"}, format="json")
    assert segunda.status_code == 200
    assert segunda.data["mensaje"] == "La factura ya estaba pagada"
    assert segunda.data["pagado_en"] == primera.data["pagado_en"]


@pytest.mark.django_db
def test_factura_solo_admite_pagado(api_client, director, contrato):
    factura = contrato.facturas.first()
    resp = api_client(director).patch(
        f"/api/contratos/{contrato.id}/facturas/{factura.id}/", {"estado": "pendiente"}, format="json"
    )
    assert resp.status_code == 400
    factura.refresh_from_db()
    assert factura.estado == "pendiente"


@pytest.mark.django_db
def test_factura_de_otro_contrato_es_404(api_client, director, academia, encargado, matricula, contrato):
    otro = crear_contrato(
        academia, encargado, [matricula],
        monto_mensual=Decimal("50"),
        fecha_inicio=datetime.date(2024, 5, 1),
        fecha_fin=datetime.date(2024, 5, 31),
    )
    factura_ajena = otro.facturas.first()
    resp = api_client(director).patch(
        f"/api/contratos/{contrato.id}/facturas/{factura_ajena.id}/", {"estado": "pagado"}, format="json"
    )
    assert resp.status_code == 404


@pytest.mark.django_db
def test_factura_con_id_no_numerico_es_404(api_client, director, contrato):
    resp = api_client(director).patch(
        f"/api/contratos/{contrato.id}/facturas/abc/", {"estado": "pagado"}, format="json"
    )
    assert resp.status_code == 404
    assert not contrato.facturas.filter(estado="pagado").exists()


@pytest.mark.django_db
def test_encargado_ve_sus_facturas_con_estado_derivado(api_client, encargado, contrato):
    resp = api_client(encargado).get("/api/hogar/facturas/")
    assert resp.status_code == 200
    assert len(resp.data) == 2
    # marzo y abril de 2024 ya vencieron
    assert {f["estado_visible"] for f in resp.data} == {"atrasado"}


@pytest.mark.django_db
def test_encargado_no_puede_crear_contratos(api_client, encargado, matricula):
    resp = api_client(encargado).post("/api/contratos/", {}, format="json")
    assert resp.status_code == 403


@pytest.mark.django_db
def test_comando_facturas_atrasadas(contrato):
    from io import StringIO

    from django.core.management import call_command

    contrato.facturas.filter(mes=datetime.date(2024, 4, 1)).update(estado="pagado")
    salida = StringIO()
    call_command("facturas_atrasadas", stdout=salida)
    assert "Facturas atrasadas: 1" in salida.getvalue()
