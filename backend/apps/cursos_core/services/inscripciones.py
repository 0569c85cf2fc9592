# apps/cursos_core/services/inscripciones.py
# ------------------------------------------------------------------------------
# Inscripción masiva de estudiantes a un horario.
# - Cada estudiante se procesa en su propia transacción: si uno falla, el lote sigue.
# - Fila existente activa → duplicado. Fila existente inactiva → se reactiva.
# - Antes de inscribir (o reactivar) se chequea superposición con sus otras inscripciones.
# ------------------------------------------------------------------------------
import logging
from dataclasses import dataclass, field

from django.db import DatabaseError, transaction
from rest_framework import status

from apps.cursos_core.models import Inscripcion
from apps.cursos_core.services.conflictos import conflictos_de_estudiante
from apps.estudiantes_core.models import Estudiante

logger = logging.getLogger(__name__)

MSG_DUPLICADO = "Estudiante ya está inscrito en esta clase"


@dataclass
class ResultadoInscripcion:
    inscripciones: list = field(default_factory=list)
    reactivadas: list = field(default_factory=list)
    duplicados: list = field(default_factory=list)
    conflictos: list = field(default_factory=list)
    errores: list = field(default_factory=list)

    @property
    def inscritos(self):
        return self.inscripciones + self.reactivadas

    @property
    def rechazados(self):
        return len(self.duplicados) + len(self.conflictos) + len(self.errores)

    def status_http(self):
        """
        201: todos inscriptos.
        207: hubo rechazos pero el lote se procesó (alguien entró o hay conflictos que informar).
        400: nadie pudo inscribirse y no hay conflictos.
        """
        if not self.rechazados:
            return status.HTTP_201_CREATED
        if self.inscritos or self.conflictos:
            return status.HTTP_207_MULTI_STATUS
        return status.HTTP_400_BAD_REQUEST


def _inscribir_uno(horario, estudiante_id, resultado):
    with transaction.atomic():
        # lock del estudiante: serializa inscripciones concurrentes del mismo alumno
        estudiante = (
            Estudiante.objects.select_for_update()
            .filter(id=estudiante_id, academia_id=horario.academia_id, deleted_at__isnull=True)
            .first()
        )
        if estudiante is None:
            resultado.errores.append({"estudiante_id": estudiante_id, "error": "Estudiante no encontrado"})
            return
        if estudiante.retirado:
            resultado.errores.append({"estudiante_id": estudiante_id, "error": "El estudiante está retirado"})
            return

        existente = Inscripcion.objects.filter(estudiante_id=estudiante_id, horario=horario).first()
        if existente and existente.estado == "activa":
            resultado.duplicados.append({"estudiante_id": estudiante_id, "error": MSG_DUPLICADO})
            return

        conflictos = conflictos_de_estudiante(estudiante_id, horario, horario.academia_id)
        if conflictos:
            resultado.conflictos.append({
                "estudiante_id": estudiante_id,
                "conflicto": conflictos[0].descripcion,
                "horarios": [c.as_dict() for c in conflictos],
            })
            return

        if existente:
            existente.estado = "activa"
            existente.profesor_id = horario.profesor_id
            existente.save(update_fields=["estado", "profesor", "actualizado_en"])
            resultado.reactivadas.append(existente)
            return

        inscripcion = Inscripcion.objects.create(
            estudiante=estudiante,
            horario=horario,
            profesor_id=horario.profesor_id,
            estado="activa",
        )
        resultado.inscripciones.append(inscripcion)


def inscribir_estudiantes(horario, estudiante_ids):
    """
    Inscribe una lista de estudiantes en `horario`.

    Args:
        horario (Horario): horario vigente destino.
        estudiante_ids (list[int]): ids a inscribir (los repetidos cuentan como duplicado).

    Returns:
        ResultadoInscripcion
    """
    resultado = ResultadoInscripcion()
    for estudiante_id in estudiante_ids:
        try:
            _inscribir_uno(horario, estudiante_id, resultado)
        except DatabaseError as e:
            # carrera con otra inscripción del mismo par (unique) u otro error de DB puntual
            logger.warning("[inscripciones.lote][error] horario=%s estudiante=%s err=%s", horario.id, estudiante_id, e)
            resultado.errores.append({"estudiante_id": estudiante_id, "error": str(e)})

    logger.info(
        "[inscripciones.lote][fin] horario=%s nuevas=%s reactivadas=%s duplicados=%s conflictos=%s errores=%s",
        horario.id,
        len(resultado.inscripciones),
        len(resultado.reactivadas),
        len(resultado.duplicados),
        len(resultado.conflictos),
        len(resultado.errores),
    )
    return resultado


def cancelar_inscripcion(inscripcion):
    inscripcion.estado = "cancelada"
    inscripcion.save(update_fields=["estado", "actualizado_en"])
    logger.info("[inscripciones.cancelar][ok] inscripcion=%s", inscripcion.id)
    return inscripcion
