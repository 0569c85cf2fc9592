# apps/contratos_core/services/facturacion.py
# ------------------------------------------------------------------------------
# Contratos y facturas mensuales.
# - Rango del contrato: primera y última fecha de clase de los cursos involucrados.
# - Una factura por mes calendario entre el mes de inicio y el mes de fin (inclusive).
# - Contrato + vínculos + facturas se escriben en una sola transacción: si falla
#   cualquier etapa no queda nada persistido.
# - Estado "atrasado" no se guarda: se deriva al leer (pendiente y mes vencido).
# ------------------------------------------------------------------------------
import logging
from collections import OrderedDict
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Max, Min, Q
from django.utils import timezone

from apps.auth_core.models import ROL_ENCARGADO
from apps.common.exceptions import NoEncontrado, Validacion
from apps.common.fechas import meses_entre, ultimo_dia_del_mes
from apps.contratos_core.models import Contrato, ContratoMatricula, FacturaContrato
from apps.cursos_core.models import FechaPeriodo, Matricula
from apps.cursos_core.services.matriculas import curso_de_academia, obtener_o_crear_matricula
from apps.estudiantes_core.models import Estudiante
from apps.estudiantes_core.services import encargados_de

logger = logging.getLogger(__name__)
User = get_user_model()


# -----------------------------
# CÁLCULOS PUROS
# -----------------------------

def planificar_facturas(fecha_inicio, fecha_fin, monto):
    """
    Facturas a emitir para el rango: [{mes, monto, estado}] una por mes calendario.
    Ej: 2024-03-15..2024-06-10 → marzo, abril, mayo y junio de 2024.
    """
    return [{"mes": mes, "monto": monto, "estado": "pendiente"} for mes in meses_entre(fecha_inicio, fecha_fin)]


def estado_visible(factura, hoy=None):
    """pendiente + hoy posterior al último día del mes facturado → 'atrasado'."""
    hoy = hoy or timezone.localdate()
    if factura.estado == "pendiente" and hoy > ultimo_dia_del_mes(factura.mes):
        return "atrasado"
    return factura.estado


def rango_fechas_clase(cursos):
    """(min, max) de las fechas de clase vigentes de los cursos, o (None, None) si no hay ninguna."""
    filtro = Q()
    for curso in cursos:
        filtro |= Q(periodo_id=curso.periodo_id, materia_id=curso.materia_id, profesor_id=curso.profesor_id)
    if not filtro:
        return None, None
    rango = (
        FechaPeriodo.objects.vigentes()
        .filter(filtro, tipo="clase")
        .aggregate(inicio=Min("fecha"), fin=Max("fecha"))
    )
    return rango["inicio"], rango["fin"]


def rango_para_matriculas(matriculas):
    """
    Rango sugerido para un contrato sobre `matriculas`:
    primero por curso exacto; si no hay fechas, cualquier fecha de clase de sus períodos.
    """
    cursos = [m.curso for m in matriculas]
    inicio, fin = rango_fechas_clase(cursos)
    if inicio is not None:
        return inicio, fin

    periodos = {c.periodo_id for c in cursos}
    if not periodos:
        return None, None
    rango = (
        FechaPeriodo.objects.vigentes()
        .filter(periodo_id__in=periodos, tipo="clase")
        .aggregate(inicio=Min("fecha"), fin=Max("fecha"))
    )
    return rango["inicio"], rango["fin"]


# -----------------------------
# VALIDACIONES
# -----------------------------

def encargado_de_academia(academia_id, encargado_id):
    encargado = User.objects.vigentes().filter(id=encargado_id, academia_id=academia_id).first()
    if encargado is None:
        raise NoEncontrado("Encargado no encontrado")
    if encargado.rol != ROL_ENCARGADO:
        raise Validacion("El usuario indicado no es un encargado")
    return encargado


def matriculas_del_encargado(encargado, matricula_ids):
    """Las matrículas deben existir, ser de la academia y de hijos del encargado."""
    if not matricula_ids:
        raise Validacion("Se requiere al menos una matrícula")
    ids = list(dict.fromkeys(matricula_ids))
    matriculas = list(
        Matricula.objects.vigentes()
        .filter(
            id__in=ids,
            academia_id=encargado.academia_id,
            estudiante__vinculos_encargados__encargado=encargado,
        )
        .select_related("curso")
        .distinct()
    )
    faltantes = sorted(set(ids) - {m.id for m in matriculas})
    if faltantes:
        raise Validacion("Matrículas inválidas para este encargado", {"matricula_ids": faltantes})
    return matriculas


def _validar_monto(monto):
    if monto is None:
        raise Validacion("monto_mensual es requerido")
    monto = Decimal(monto)
    if monto < 0:
        raise Validacion("monto_mensual no puede ser negativo")
    return monto


# -----------------------------
# ALTA DE CONTRATOS
# -----------------------------

@transaction.atomic
def crear_contrato(
    academia,
    encargado,
    matriculas,
    *,
    monto_mensual,
    fecha_inicio,
    fecha_fin,
    tipo="estandar",
    notas="",
    creado_por=None,
):
    """
    Crea contrato, vínculos con matrículas y una factura pendiente por mes.

    Returns:
        Contrato (con `facturas_creadas` seteado para la respuesta)
    """
    monto = _validar_monto(monto_mensual)
    if not fecha_inicio or not fecha_fin:
        raise Validacion("fecha_inicio y fecha_fin son requeridas")
    if fecha_fin < fecha_inicio:
        raise Validacion("fecha_fin debe ser posterior a fecha_inicio")
    if not matriculas:
        raise Validacion("Se requiere al menos una matrícula")

    contrato = Contrato.objects.create(
        academia=academia,
        encargado=encargado,
        tipo=tipo,
        monto_mensual=monto,
        fecha_inicio=fecha_inicio,
        fecha_fin=fecha_fin,
        notas=notas,
        creado_por=creado_por,
    )
    ContratoMatricula.objects.bulk_create([ContratoMatricula(contrato=contrato, matricula=m) for m in matriculas])
    facturas = FacturaContrato.objects.bulk_create([
        FacturaContrato(contrato=contrato, **f) for f in planificar_facturas(fecha_inicio, fecha_fin, monto)
    ])

    contrato.facturas_creadas = len(facturas)
    logger.info(
        "[contratos.crear][ok] contrato=%s tipo=%s encargado=%s matriculas=%s facturas=%s",
        contrato.id, tipo, encargado.id, len(matriculas), len(facturas),
    )
    return contrato


@transaction.atomic
def crear_contrato_especial(academia, encargado, items, *, monto_mensual, notas="", creado_por=None):
    """
    Contrato sobre pares (estudiante, curso): crea las matrículas que falten y toma
    el rango de todas las fechas de clase de esos cursos.
    """
    pares = list(OrderedDict.fromkeys((int(i["estudiante_id"]), int(i["curso_id"])) for i in items))
    if not pares:
        raise Validacion("Se requiere al menos un ítem")
    _validar_monto(monto_mensual)

    hijos = {e.id: e for e in Estudiante.objects.vigentes().filter(
        id__in={p[0] for p in pares},
        academia=academia,
        vinculos_encargados__encargado=encargado,
    )}

    cursos, matriculas = {}, []
    for estudiante_id, curso_id in pares:
        estudiante = hijos.get(estudiante_id)
        if estudiante is None:
            raise Validacion("El estudiante no pertenece al encargado", {"estudiante_id": estudiante_id})
        if estudiante.retirado:
            raise Validacion("El estudiante está retirado", {"estudiante_id": estudiante_id})
        curso = cursos.get(curso_id) or curso_de_academia(academia.id, curso_id)
        cursos[curso_id] = curso
        matricula, creada = obtener_o_crear_matricula(academia, estudiante, curso)
        if creada:
            logger.info("[contratos.especial][matricula_nueva] matricula=%s", matricula.id)
        matriculas.append(matricula)

    inicio, fin = rango_fechas_clase(cursos.values())
    if inicio is None:
        raise Validacion("Los cursos seleccionados no tienen fechas de clase")

    return crear_contrato(
        academia, encargado, matriculas,
        monto_mensual=monto_mensual, fecha_inicio=inicio, fecha_fin=fin,
        tipo="especial", notas=notas, creado_por=creado_por,
    )


@transaction.atomic
def matricular_con_contratos(academia, curso_id, estudiante_ids, creado_por=None):
    """
    Matrícula grupal: matricula a todos los estudiantes en el curso y genera un contrato
    por encargado con monto = cantidad de hijos matriculados × mensualidad del curso.
    Cualquier rechazo aborta el lote completo antes de escribir.

    Returns:
        (matriculas, contratos)
    """
    curso = curso_de_academia(academia.id, curso_id)
    if not curso.mensualidad or curso.mensualidad <= 0:
        raise Validacion("El curso no tiene mensualidad configurada")
    if curso.periodo.academia_id != academia.id:
        raise Validacion("El período del curso no pertenece a la academia")

    inicio, fin = rango_fechas_clase([curso])
    if inicio is None:
        raise Validacion("El curso no tiene fechas de clase")

    ids = list(dict.fromkeys(estudiante_ids))
    if not ids:
        raise Validacion("Se requiere al menos un estudiante")
    estudiantes = {e.id: e for e in Estudiante.objects.vigentes().filter(id__in=ids, academia=academia)}
    ya_matriculados = set(
        Matricula.objects.vigentes().filter(curso=curso, estudiante_id__in=ids).values_list("estudiante_id", flat=True)
    )

    errores, por_encargado = [], OrderedDict()
    for estudiante_id in ids:
        estudiante = estudiantes.get(estudiante_id)
        if estudiante is None:
            errores.append({"estudiante_id": estudiante_id, "error": "Estudiante no encontrado"})
            continue
        if estudiante.retirado:
            errores.append({"estudiante_id": estudiante_id, "error": "El estudiante está retirado"})
            continue
        if estudiante_id in ya_matriculados:
            errores.append({"estudiante_id": estudiante_id, "error": "El estudiante ya está matriculado en este curso"})
            continue
        encargados = encargados_de(estudiante)
        if not encargados:
            errores.append({"estudiante_id": estudiante_id, "error": "El estudiante no tiene encargado"})
            continue
        por_encargado.setdefault(encargados[0], []).append(estudiante)

    if errores:
        raise Validacion("No se pudo matricular al grupo", errores)

    matriculas, contratos = [], []
    for encargado, hijos in por_encargado.items():
        nuevas = [Matricula.objects.create(academia=academia, estudiante=e, curso=curso) for e in hijos]
        matriculas.extend(nuevas)
        contratos.append(crear_contrato(
            academia, encargado, nuevas,
            monto_mensual=curso.mensualidad * len(nuevas),
            fecha_inicio=inicio, fecha_fin=fin,
            tipo="grupal", creado_por=creado_por,
        ))

    logger.info(
        "[contratos.grupal][ok] curso=%s matriculas=%s contratos=%s",
        curso.id, len(matriculas), len(contratos),
    )
    return matriculas, contratos


# -----------------------------
# PAGOS
# -----------------------------

@transaction.atomic
def marcar_factura_pagada(factura_id, contrato):
    """
    pendiente → pagado, registrando pagado_en una sola vez.
    Si ya estaba pagada no se toca. Devuelve (factura, cambio).
    """
    factura = FacturaContrato.objects.select_for_update().filter(id=factura_id, contrato=contrato).first()
    if factura is None:
        raise NoEncontrado("Factura no encontrada en este contrato")
    if factura.estado == "pagado":
        logger.info("[facturas.pagar][ya_pagada] factura=%s", factura.id)
        return factura, False

    factura.estado = "pagado"
    factura.pagado_en = timezone.now()
    factura.save(update_fields=["estado", "pagado_en"])
    logger.info("[facturas.pagar][ok] factura=%s contrato=%s", factura.id, contrato.id)
    return factura, True
