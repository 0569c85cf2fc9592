# apps/common/logging.py
import logging

from rest_framework import serializers

logger = logging.getLogger(__name__)


class LoggedModelSerializer(serializers.ModelSerializer):
    """ModelSerializer que registra create y update (modelo, id y campos tocados)."""

    def _usuario_id(self):
        request = self.context.get("request")
        return getattr(getattr(request, "user", None), "id", None)

    def create(self, validated_data):
        instance = super().create(validated_data)
        logger.info(
            "[%s.create][ok] id=%s user=%s campos=%s",
            instance.__class__.__name__, instance.pk, self._usuario_id(), sorted(validated_data),
        )
        return instance

    def update(self, instance, validated_data):
        instance = super().update(instance, validated_data)
        logger.info(
            "[%s.update][ok] id=%s user=%s campos=%s",
            instance.__class__.__name__, instance.pk, self._usuario_id(), sorted(validated_data),
        )
        return instance
