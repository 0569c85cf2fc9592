# apps/estudiantes_core/services.py
from apps.common.exceptions import NoEncontrado
from apps.estudiantes_core.models import Estudiante


def estudiantes_del_encargado(encargado):
    """Hijos vigentes del encargado."""
    return (
        Estudiante.objects.vigentes()
        .filter(vinculos_encargados__encargado=encargado, academia_id=encargado.academia_id)
        .distinct()
    )


def estudiante_del_encargado(encargado, estudiante_id):
    estudiante = estudiantes_del_encargado(encargado).filter(id=estudiante_id).first()
    if estudiante is None:
        raise NoEncontrado("Estudiante no encontrado")
    return estudiante


def encargados_de(estudiante):
    """Encargados vigentes del estudiante, el más antiguo primero."""
    return [
        v.encargado
        for v in estudiante.vinculos_encargados.select_related("encargado").order_by("creado_en", "id")
        if v.encargado.deleted_at is None
    ]
