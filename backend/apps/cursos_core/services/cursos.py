# apps/cursos_core/services/cursos.py
# ------------------------------------------------------------------------------
# Alta de períodos, cursos y horarios.
# - Un curso nace con sus fechas de clase y un horario por cada turno semanal.
# - Todo el alta de un curso es atómica.
# - Los horarios sueltos se crean franja por franja (éxito parcial → advertencias).
# ------------------------------------------------------------------------------
import logging
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction

from apps.auth_core.models import ROL_PROFESOR
from apps.common.exceptions import NoEncontrado, Validacion
from apps.common.fechas import DIAS_SEMANA, hhmm, to_time
from apps.cursos_core.models import (
    PERIODOS,
    Curso,
    FechaPeriodo,
    Horario,
    Inscripcion,
    Materia,
    Periodo,
    ProfesorMateria,
)
from apps.cursos_core.services.conflictos import conflictos_de_estudiante, conflictos_de_profesor, rango_solapa

logger = logging.getLogger(__name__)
User = get_user_model()

ANIO_MINIMO, ANIO_MAXIMO = 2000, 2100


# -----------------------------
# HELPERS
# -----------------------------

def profesor_de_academia(academia_id, profesor_id):
    profesor = User.objects.vigentes().filter(id=profesor_id, academia_id=academia_id, rol=ROL_PROFESOR).first()
    if profesor is None:
        raise NoEncontrado("Profesor no encontrado")
    return profesor


def materia_de_academia(academia_id, materia_id):
    materia = Materia.objects.vigentes().filter(id=materia_id, academia_id=academia_id).first()
    if materia is None:
        raise NoEncontrado("Materia no encontrada")
    return materia


def normalizar_turno(turno, con_limites=False):
    """
    Valida y normaliza {dia_semana, hora_inicio, hora_fin}.
    Con `con_limites` exige además la franja ACADEMIA_HORA_MINIMA..ACADEMIA_HORA_MAXIMA.
    """
    try:
        dia = int(turno.get("dia_semana"))
    except (TypeError, ValueError):
        raise Validacion("dia_semana inválido", turno)
    if dia not in DIAS_SEMANA:
        raise Validacion("dia_semana debe estar entre 1 (lunes) y 7 (domingo)", turno)

    try:
        inicio = to_time(turno.get("hora_inicio"))
        fin = to_time(turno.get("hora_fin"))
    except ValueError as e:
        raise Validacion(str(e), turno)

    if fin <= inicio:
        raise Validacion("hora_fin debe ser posterior a hora_inicio", turno)

    if con_limites:
        minima = to_time(settings.ACADEMIA_HORA_MINIMA)
        maxima = to_time(settings.ACADEMIA_HORA_MAXIMA)
        if inicio < minima or fin > maxima:
            raise Validacion(f"Los turnos deben estar entre {hhmm(minima)} y {hhmm(maxima)}", turno)

    return {"dia_semana": dia, "hora_inicio": inicio, "hora_fin": fin}


def fechas_por_turnos(fecha_inicio, fecha_fin, dias_semana):
    """Todas las fechas del rango (inclusive) cuyo día ISO (lunes=1 … domingo=7) está en `dias_semana`."""
    fechas = []
    actual = fecha_inicio
    while actual <= fecha_fin:
        if actual.isoweekday() in dias_semana:
            fechas.append(actual)
        actual += timedelta(days=1)
    return fechas


# -----------------------------
# PERÍODOS
# -----------------------------

def validar_periodo(anio, periodo):
    try:
        anio = int(anio)
    except (TypeError, ValueError):
        raise Validacion("anio inválido")
    if not ANIO_MINIMO <= anio <= ANIO_MAXIMO:
        raise Validacion(f"anio debe estar entre {ANIO_MINIMO} y {ANIO_MAXIMO}")
    if periodo not in dict(PERIODOS):
        raise Validacion("periodo debe ser uno de I, II, III, IV, V, VI")
    return anio, periodo


@transaction.atomic
def resolver_periodo(academia, anio, periodo, crear=True):
    """
    Devuelve el período vigente (academia, anio, periodo).
    Si existe borrado lo restaura; si no existe y `crear`, lo crea.
    Retorna (periodo, creado_o_restaurado).
    """
    anio, periodo = validar_periodo(anio, periodo)
    qs = Periodo.objects.select_for_update().filter(academia=academia, anio=anio, periodo=periodo)

    vigente = qs.filter(deleted_at__isnull=True).first()
    if vigente:
        return vigente, False
    if not crear:
        raise NoEncontrado("Período no encontrado")

    borrado = qs.filter(deleted_at__isnull=False).order_by("-deleted_at").first()
    if borrado:
        borrado.restaurar()
        logger.info("[periodos.resolver][restaurado] periodo=%s academia=%s", borrado.id, academia.id)
        return borrado, True

    nuevo = Periodo.objects.create(academia=academia, anio=anio, periodo=periodo)
    logger.info("[periodos.resolver][creado] periodo=%s academia=%s", nuevo.id, academia.id)
    return nuevo, True


def validar_fecha_clase(academia_id, materia_id, profesor_id):
    """Las fechas tipo `clase` necesitan materia y profesor de la misma academia."""
    if not materia_id or not profesor_id:
        raise Validacion("Las fechas de clase requieren materia_id y profesor_id")
    materia_de_academia(academia_id, materia_id)
    profesor_de_academia(academia_id, profesor_id)


# -----------------------------
# CURSOS
# -----------------------------

@transaction.atomic
def crear_curso(
    academia,
    *,
    profesor_id,
    materia_id,
    anio,
    periodo,
    turnos,
    fechas_sesion=None,
    fecha_inicio=None,
    fecha_fin=None,
    mensualidad=None,
):
    """
    Alta completa de un curso: período, curso, fechas de clase y horarios.

    Las fechas salen de `fechas_sesion` si vienen; si no, de recorrer
    fecha_inicio..fecha_fin tomando los días de semana de los turnos.
    """
    profesor = profesor_de_academia(academia.id, profesor_id)
    materia = materia_de_academia(academia.id, materia_id)
    if not ProfesorMateria.objects.filter(profesor=profesor, materia=materia).exists():
        raise Validacion("El profesor no tiene asignada esta materia")

    if not turnos:
        raise Validacion("Se requiere al menos un turno")
    turnos = [normalizar_turno(t, con_limites=True) for t in turnos]

    # turnos del mismo pedido que se pisan entre sí
    for i, a in enumerate(turnos):
        for b in turnos[i + 1:]:
            if a["dia_semana"] == b["dia_semana"] and rango_solapa(a["hora_inicio"], a["hora_fin"], b["hora_inicio"], b["hora_fin"]):
                raise Validacion("Los turnos enviados se superponen entre sí", [a, b])

    if mensualidad is not None and mensualidad < 0:
        raise Validacion("La mensualidad no puede ser negativa")

    periodo_obj, _ = resolver_periodo(academia, anio, periodo)

    if Curso.objects.vigentes().filter(profesor=profesor, materia=materia, periodo=periodo_obj).exists():
        raise Validacion("Ya existe un curso para este profesor, materia y período")

    for t in turnos:
        choques = conflictos_de_profesor(profesor.id, t["dia_semana"], t["hora_inicio"], t["hora_fin"], periodo_id=periodo_obj.id)
        if choques:
            raise Validacion(
                "El profesor ya tiene un horario que se superpone",
                [c.as_dict() for c in choques],
            )

    if fechas_sesion:
        fechas = sorted(set(fechas_sesion))
    elif fecha_inicio and fecha_fin:
        if fecha_fin < fecha_inicio:
            raise Validacion("fecha_fin debe ser posterior a fecha_inicio")
        fechas = fechas_por_turnos(fecha_inicio, fecha_fin, {t["dia_semana"] for t in turnos})
    else:
        fechas = []

    curso = Curso.objects.create(
        academia=academia,
        profesor=profesor,
        materia=materia,
        periodo=periodo_obj,
        mensualidad=mensualidad,
    )
    FechaPeriodo.objects.bulk_create([
        FechaPeriodo(periodo=periodo_obj, fecha=f, tipo="clase", materia=materia, profesor=profesor)
        for f in fechas
    ])
    for t in turnos:
        Horario.objects.create(
            academia=academia,
            profesor=profesor,
            curso=curso,
            materia=materia,
            periodo=periodo_obj,
            nombre=materia.nombre,
            **t,
        )

    logger.info(
        "[cursos.crear][ok] curso=%s academia=%s profesor=%s fechas=%s turnos=%s",
        curso.id, academia.id, profesor.id, len(fechas), len(turnos),
    )
    return curso


@transaction.atomic
def eliminar_curso(curso):
    """Baja lógica del curso junto con sus horarios y fechas de clase."""
    curso.horarios.vigentes().soft_delete()
    curso.fechas_clase().soft_delete()
    curso.soft_delete()
    logger.info("[cursos.eliminar][ok] curso=%s", curso.id)


# -----------------------------
# HORARIOS
# -----------------------------

def crear_horarios(academia, profesor, franjas, *, nombre, materia=None, periodo=None, curso=None, aula="", capacidad=None):
    """
    Crea un horario por franja. Cada franja se valida y chequea contra los horarios
    del profesor de forma independiente.

    Returns:
        (creados: list[Horario], advertencias: list[dict])
    """
    creados, advertencias = [], []
    for franja in franjas:
        try:
            t = normalizar_turno(franja)
        except Validacion as e:
            advertencias.append({"franja": franja, "error": e.mensaje})
            continue

        choques = conflictos_de_profesor(
            profesor.id, t["dia_semana"], t["hora_inicio"], t["hora_fin"],
            periodo_id=periodo.id if periodo else None,
        )
        if choques:
            advertencias.append({
                "franja": franja,
                "error": choques[0].descripcion,
                "conflictos": [c.as_dict() for c in choques],
            })
            continue

        creados.append(Horario.objects.create(
            academia=academia,
            profesor=profesor,
            materia=materia,
            periodo=periodo,
            curso=curso,
            nombre=nombre,
            aula=aula,
            capacidad=capacidad,
            **t,
        ))

    logger.info(
        "[horarios.crear][fin] academia=%s profesor=%s creados=%s advertencias=%s",
        academia.id, profesor.id, len(creados), len(advertencias),
    )
    return creados, advertencias


@transaction.atomic
def actualizar_horario(horario, cambios):
    """
    Actualiza día/hora/nombre re-chequeando superposición (excluyéndose a sí mismo)
    contra los horarios del profesor y contra las inscripciones de cada estudiante inscripto.
    """
    t = normalizar_turno({
        "dia_semana": cambios.get("dia_semana", horario.dia_semana),
        "hora_inicio": cambios.get("hora_inicio", horario.hora_inicio),
        "hora_fin": cambios.get("hora_fin", horario.hora_fin),
    })
    choques = conflictos_de_profesor(
        horario.profesor_id, t["dia_semana"], t["hora_inicio"], t["hora_fin"],
        periodo_id=horario.periodo_id, excluir_horario_id=horario.id,
    )
    if choques:
        raise Validacion("El profesor ya tiene un horario que se superpone", [c.as_dict() for c in choques])

    propuesto = Horario(id=horario.id, academia_id=horario.academia_id, **t)
    inscriptos = (
        Inscripcion.objects.select_for_update()
        .filter(horario=horario, estado="activa")
        .order_by("estudiante_id")
        .values_list("estudiante_id", flat=True)
    )
    choques_estudiantes = []
    for estudiante_id in inscriptos:
        conflictos = conflictos_de_estudiante(estudiante_id, propuesto, horario.academia_id)
        if conflictos:
            choques_estudiantes.append({
                "estudiante_id": estudiante_id,
                "conflictos": [c.descripcion for c in conflictos],
            })
    if choques_estudiantes:
        logger.info("[horarios.actualizar][rechazado] horario=%s estudiantes=%s", horario.id, len(choques_estudiantes))
        raise Validacion("El cambio genera superposición para estudiantes inscriptos", choques_estudiantes)

    for campo, valor in t.items():
        setattr(horario, campo, valor)
    for campo in ("nombre", "aula", "capacidad"):
        if campo in cambios:
            setattr(horario, campo, cambios[campo])
    horario.save()
    logger.info("[horarios.actualizar][ok] horario=%s", horario.id)
    return horario
