# apps/common/fechas.py

import calendar
from datetime import date, datetime, time

DIAS_SEMANA = {
    1: "Lunes",
    2: "Martes",
    3: "Miércoles",
    4: "Jueves",
    5: "Viernes",
    6: "Sábado",
    7: "Domingo",
}

DIA_SEMANA_CHOICES = list(DIAS_SEMANA.items())


def proximo_mes(anio: int, mes: int) -> tuple[int, int]:
    """
    Devuelve el (año, mes) del mes siguiente.
    Ej: (2025, 8) → (2025, 9), (2025, 12) → (2026, 1)
    """
    return (anio + 1, 1) if mes == 12 else (anio, mes + 1)


def primer_dia_del_mes(fecha: date) -> date:
    return fecha.replace(day=1)


def ultimo_dia_del_mes(fecha: date) -> date:
    return fecha.replace(day=calendar.monthrange(fecha.year, fecha.month)[1])


def meses_entre(inicio: date, fin: date) -> list[date]:
    """
    Primer día de cada mes calendario entre `inicio` y `fin`, ambos inclusive.
    Ej: 2024-03-15 .. 2024-06-10 → [2024-03-01, 2024-04-01, 2024-05-01, 2024-06-01]
    """
    if fin < inicio:
        return []
    meses = []
    anio, mes = inicio.year, inicio.month
    while (anio, mes) <= (fin.year, fin.month):
        meses.append(date(anio, mes, 1))
        anio, mes = proximo_mes(anio, mes)
    return meses


def to_time(valor) -> time:
    """Acepta time, 'HH:MM' o 'HH:MM:SS'. Lanza ValueError si no parsea."""
    if isinstance(valor, time):
        return valor
    texto = str(valor).strip()
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(texto, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Hora inválida: {valor!r}")


def hhmm(valor: time) -> str:
    return valor.strftime("%H:%M")
