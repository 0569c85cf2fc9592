# apps/cursos_core/services/matriculas.py
import logging

from django.db import transaction

from apps.common.exceptions import NoEncontrado, Validacion
from apps.cursos_core.models import Cancion, Curso, Matricula, MatriculaCancion
from apps.estudiantes_core.models import Estudiante

logger = logging.getLogger(__name__)


def estudiante_matriculable(academia_id, estudiante_id):
    estudiante = Estudiante.objects.vigentes().filter(id=estudiante_id, academia_id=academia_id).first()
    if estudiante is None:
        raise NoEncontrado("Estudiante no encontrado")
    if estudiante.retirado:
        raise Validacion("El estudiante está retirado")
    return estudiante


def curso_de_academia(academia_id, curso_id):
    curso = (
        Curso.objects.vigentes()
        .filter(id=curso_id, academia_id=academia_id)
        .select_related("materia", "periodo", "profesor")
        .first()
    )
    if curso is None:
        raise NoEncontrado("Curso no encontrado")
    return curso


def vincular_canciones(matricula, cancion_ids):
    """Agrega canciones de la academia a la matrícula; ignora las ajenas o borradas. Devuelve las agregadas."""
    validas = list(
        Cancion.objects.vigentes()
        .filter(id__in=cancion_ids, academia_id=matricula.academia_id)
        .values_list("id", flat=True)
    )
    ya = set(matricula.vinculos_canciones.values_list("cancion_id", flat=True))
    nuevas = [cid for cid in validas if cid not in ya]
    MatriculaCancion.objects.bulk_create([MatriculaCancion(matricula=matricula, cancion_id=cid) for cid in nuevas])
    return nuevas


@transaction.atomic
def crear_matricula(academia, estudiante_id, curso_id, cancion_ids=None):
    estudiante = estudiante_matriculable(academia.id, estudiante_id)
    curso = curso_de_academia(academia.id, curso_id)

    if Matricula.objects.vigentes().filter(estudiante=estudiante, curso=curso).exists():
        raise Validacion("El estudiante ya está matriculado en este curso")

    matricula = Matricula.objects.create(academia=academia, estudiante=estudiante, curso=curso)
    if cancion_ids:
        vincular_canciones(matricula, cancion_ids)

    logger.info("[matriculas.crear][ok] matricula=%s estudiante=%s curso=%s", matricula.id, estudiante.id, curso.id)
    return matricula


def obtener_o_crear_matricula(academia, estudiante, curso):
    """Matrícula vigente del par o una nueva. Devuelve (matricula, creada)."""
    existente = Matricula.objects.vigentes().filter(estudiante=estudiante, curso=curso).first()
    if existente:
        return existente, False
    return Matricula.objects.create(academia=academia, estudiante=estudiante, curso=curso), True
