# apps/aula_core/services.py
import logging

from django.db import IntegrityError, transaction

from apps.aula_core.models import Escala, InsigniaEstudiante, Rubrica
from apps.auth_core.models import ROL_PROFESOR
from apps.common.exceptions import Conflicto, NoEncontrado, Prohibido, Validacion
from apps.cursos_core.models import FechaPeriodo, Matricula

logger = logging.getLogger(__name__)


def matricula_visible(usuario, rol, academia_id, matricula_id):
    """Matrícula vigente de la academia; un profesor solo accede a las de sus cursos."""
    qs = Matricula.objects.vigentes().select_related("curso")
    if academia_id is not None:
        qs = qs.filter(academia_id=academia_id)
    matricula = qs.filter(id=matricula_id).first()
    if matricula is None:
        raise NoEncontrado("Matrícula no encontrada")
    if rol == ROL_PROFESOR and matricula.curso.profesor_id != usuario.id:
        raise Prohibido("La matrícula no corresponde a un curso del profesor")
    return matricula


def clase_de_matricula(matricula, fecha_periodo_id):
    """La fecha debe ser vigente y del mismo período que el curso de la matrícula."""
    fecha = FechaPeriodo.objects.vigentes().filter(id=fecha_periodo_id).first()
    if fecha is None:
        raise NoEncontrado("Fecha de período no encontrada")
    if fecha.periodo_id != matricula.curso.periodo_id:
        raise Validacion("La fecha no pertenece al período del curso")
    return fecha


def upsert_registro(modelo, matricula, fecha, valores, usuario, **clave_extra):
    """update_or_create sobre (matricula, fecha_periodo[, clave_extra])."""
    obj, creado = modelo.objects.update_or_create(
        matricula=matricula,
        fecha_periodo=fecha,
        **clave_extra,
        defaults={**valores, "registrado_por": usuario},
    )
    logger.info(
        "[aula.%s][%s] id=%s matricula=%s fecha=%s",
        modelo.__name__.lower(), "alta" if creado else "actualizado", obj.id, matricula.id, fecha.id,
    )
    return obj, creado


def rubricas_para_materia(academia_id, materia_id=None):
    """Rúbricas propias de la materia; si no tiene, las rúbricas por defecto de la academia."""
    if materia_id:
        propias = Rubrica.objects.filter(academia_id=academia_id, materias__materia_id=materia_id)
        if propias.exists():
            return propias
    return Rubrica.objects.filter(academia_id=academia_id, por_defecto=True)


def escalas_de_academia(academia_id):
    return Escala.objects.filter(academia_id=academia_id)


def otorgar_insignia(estudiante, insignia, usuario, matricula=None, notas=""):
    if InsigniaEstudiante.objects.filter(estudiante=estudiante, insignia=insignia).exists():
        raise Conflicto("El estudiante ya tiene esta insignia")
    try:
        with transaction.atomic():
            otorgada = InsigniaEstudiante.objects.create(
                estudiante=estudiante, insignia=insignia, matricula=matricula, otorgada_por=usuario, notas=notas,
            )
    except IntegrityError:
        raise Conflicto("El estudiante ya tiene esta insignia")
    logger.info("[aula.insignias][otorgada] estudiante=%s insignia=%s", estudiante.id, insignia.id)
    return otorgada
