# backend/tests/test_fechas_y_conflictos.py
import datetime

import pytest

from apps.common.fechas import meses_entre, proximo_mes, to_time
from apps.cursos_core.models import Horario
from apps.cursos_core.services.conflictos import conflictos_de_profesor, rango_solapa
from apps.cursos_core.services.cursos import fechas_por_turnos

t = to_time


@pytest.mark.parametrize("i1, f1, i2, f2, esperado", [
    ("10:00", "11:00", "11:00", "12:00", False),  # pegados
    ("10:00", "11:00", "10:30", "11:30", True),
    ("10:00", "12:00", "10:30", "11:00", True),   # contenido
    ("09:00", "10:00", "10:30", "11:30", False),
])
def test_rango_solapa_semiabierto(i1, f1, i2, f2, esperado):
    assert rango_solapa(t(i1), t(f1), t(i2), t(f2)) is esperado
    assert rango_solapa(t(i2), t(f2), t(i1), t(f1)) is esperado


def test_meses_entre_incluye_ambos_extremos():
    meses = meses_entre(datetime.date(2024, 3, 15), datetime.date(2024, 6, 10))
    assert meses == [datetime.date(2024, m, 1) for m in (3, 4, 5, 6)]


def test_meses_entre_cruza_el_anio_y_rango_invertido():
    assert meses_entre(datetime.date(2024, 12, 20), datetime.date(2025, 1, 5)) == [
        datetime.date(2024, 12, 1), datetime.date(2025, 1, 1),
    ]
    assert meses_entre(datetime.date(2024, 5, 1), datetime.date(2024, 4, 1)) == []


def test_proximo_mes_diciembre():
    assert proximo_mes(2025, 12) == (2026, 1)


def test_fechas_por_turnos_usa_dia_iso():
    # julio 2024: lunes 1, 8, 15, 22, 29
    fechas = fechas_por_turnos(datetime.date(2024, 7, 1), datetime.date(2024, 7, 31), {1})
    assert [f.day for f in fechas] == [1, 8, 15, 22, 29]


def test_to_time_rechaza_texto_invalido():
    with pytest.raises(ValueError):
        to_time("25 horas")


@pytest.mark.django_db
def test_conflictos_de_profesor(academia, profesor, periodo):
    Horario.objects.create(
        academia=academia, profesor=profesor, periodo=periodo, nombre="Guitarra A",
        dia_semana=1, hora_inicio=t("10:00"), hora_fin=t("11:00"),
    )

    choques = conflictos_de_profesor(profesor.id, 1, t("10:30"), t("11:30"), periodo_id=periodo.id)
    assert len(choques) == 1
    assert choques[0].descripcion == "Conflicto de horario: Guitarra A (Lunes, 10:00-11:00)"

    assert conflictos_de_profesor(profesor.id, 1, t("11:00"), t("12:00")) == []
    assert conflictos_de_profesor(profesor.id, 2, t("10:00"), t("11:00")) == []


@pytest.mark.django_db
def test_conflictos_ignoran_horarios_eliminados_y_el_propio(academia, profesor):
    h = Horario.objects.create(
        academia=academia, profesor=profesor, nombre="Piano",
        dia_semana=3, hora_inicio=t("15:00"), hora_fin=t("16:00"),
    )
    assert conflictos_de_profesor(profesor.id, 3, t("15:00"), t("16:00"), excluir_horario_id=h.id) == []

    h.soft_delete()
    assert conflictos_de_profesor(profesor.id, 3, t("15:00"), t("16:00")) == []
