# apps/cursos_core/services/conflictos.py
# ------------------------------------------------------------------------------
# Detección de superposición de horarios semanales.
# - Intervalos semiabiertos [inicio, fin): 10:00-11:00 y 11:00-12:00 NO chocan.
# - Profesor: dos horarios vigentes del mismo profesor no pueden pisarse el mismo día.
# - Estudiante: no puede tener dos inscripciones activas cuyos horarios se pisen.
# ------------------------------------------------------------------------------
import logging
from dataclasses import dataclass

from django.db.models import Q

from apps.common.fechas import DIAS_SEMANA, hhmm
from apps.cursos_core.models import Horario, Inscripcion

logger = logging.getLogger(__name__)


def rango_solapa(i1, f1, i2, f2) -> bool:
    """True si [i1, f1) y [i2, f2) se superponen."""
    return i1 < f2 and i2 < f1


@dataclass(frozen=True)
class Conflicto:
    horario_id: int
    nombre: str
    dia_semana: int
    hora_inicio: object
    hora_fin: object

    @classmethod
    def desde_horario(cls, horario):
        return cls(horario.id, horario.nombre, horario.dia_semana, horario.hora_inicio, horario.hora_fin)

    @property
    def descripcion(self):
        return (
            f"Conflicto de horario: {self.nombre} "
            f"({DIAS_SEMANA[self.dia_semana]}, {hhmm(self.hora_inicio)}-{hhmm(self.hora_fin)})"
        )

    def as_dict(self):
        return {
            "horario_id": self.horario_id,
            "nombre": self.nombre,
            "dia_semana": self.dia_semana,
            "hora_inicio": hhmm(self.hora_inicio),
            "hora_fin": hhmm(self.hora_fin),
            "descripcion": self.descripcion,
        }


def conflictos_de_profesor(profesor_id, dia_semana, hora_inicio, hora_fin, periodo_id=None, excluir_horario_id=None):
    """
    Horarios vigentes del profesor que se pisan con la franja dada.
    Con período: solo chocan horarios del mismo período o sin período.
    """
    qs = Horario.objects.vigentes().filter(
        profesor_id=profesor_id,
        dia_semana=dia_semana,
        hora_inicio__lt=hora_fin,
        hora_fin__gt=hora_inicio,
    )
    if periodo_id is not None:
        qs = qs.filter(Q(periodo_id=periodo_id) | Q(periodo__isnull=True))
    if excluir_horario_id is not None:
        qs = qs.exclude(id=excluir_horario_id)
    return [Conflicto.desde_horario(h) for h in qs.order_by("hora_inicio")]


def conflictos_de_estudiante(estudiante_id, horario, academia_id):
    """
    Inscripciones activas del estudiante (misma academia, mismo día) cuyo horario
    se superpone con `horario`. El propio horario nunca cuenta como conflicto.
    """
    inscripciones = (
        Inscripcion.objects
        .filter(
            estudiante_id=estudiante_id,
            estado="activa",
            horario__academia_id=academia_id,
            horario__deleted_at__isnull=True,
            horario__dia_semana=horario.dia_semana,
        )
        .exclude(horario_id=horario.id)
        .select_related("horario")
    )
    conflictos = [
        Conflicto.desde_horario(i.horario)
        for i in inscripciones
        if rango_solapa(horario.hora_inicio, horario.hora_fin, i.horario.hora_inicio, i.horario.hora_fin)
    ]
    if conflictos:
        logger.debug(
            "[conflictos.estudiante] estudiante=%s horario=%s choques=%s",
            estudiante_id, horario.id, [c.horario_id for c in conflictos],
        )
    return conflictos
