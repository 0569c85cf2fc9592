# apps/common/models.py

from django.db import models
from django.utils import timezone


class SoftDeleteQuerySet(models.QuerySet):
    """QuerySet con helpers de borrado lógico (deleted_at)."""

    def vigentes(self):
        return self.filter(deleted_at__isnull=True)

    def eliminados(self):
        return self.filter(deleted_at__isnull=False)

    def soft_delete(self):
        return self.update(deleted_at=timezone.now())


class SoftDeleteModel(models.Model):
    """
    Base abstracta para todo lo que se borra lógicamente.
    El manager por defecto NO filtra: cada consulta decide si usa .vigentes().
    """
    deleted_at = models.DateTimeField(null=True, blank=True, db_index=True)

    objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        abstract = True

    @property
    def eliminado(self):
        return self.deleted_at is not None

    def soft_delete(self):
        self.deleted_at = timezone.now()
        self.save(update_fields=["deleted_at"])

    def restaurar(self):
        self.deleted_at = None
        self.save(update_fields=["deleted_at"])


class TimeStampedModel(models.Model):
    creado_en = models.DateTimeField(auto_now_add=True)
    actualizado_en = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
