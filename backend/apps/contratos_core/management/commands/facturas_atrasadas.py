# apps/contratos_core/management/commands/facturas_atrasadas.py

import logging

from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.common.fechas import primer_dia_del_mes
from apps.contratos_core.models import FacturaContrato

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Lista las facturas pendientes cuyo mes ya venció (estado visible 'atrasado'), agrupadas por academia"

    def add_arguments(self, parser):
        parser.add_argument("--academia", type=int, help="Limitar a una academia")

    def handle(self, *args, **options):
        hoy = timezone.localdate()
        # vencida ⇔ el mes facturado es anterior al mes en curso
        qs = (
            FacturaContrato.objects
            .filter(estado="pendiente", mes__lt=primer_dia_del_mes(hoy))
            .select_related("contrato__academia", "contrato__encargado")
            .order_by("contrato__academia_id", "mes")
        )
        if options.get("academia"):
            qs = qs.filter(contrato__academia_id=options["academia"])

        total = 0
        academia_actual = None
        for factura in qs:
            contrato = factura.contrato
            if contrato.academia_id != academia_actual:
                academia_actual = contrato.academia_id
                self.stdout.write(self.style.MIGRATE_HEADING(f"{contrato.academia.nombre} (id={academia_actual})"))
            self.stdout.write(
                f"  factura={factura.id} contrato={contrato.id} encargado={contrato.encargado.email} "
                f"mes={factura.mes:%Y-%m} monto={factura.monto}"
            )
            total += 1

        logger.info("[facturas_atrasadas][fin] total=%s hoy=%s", total, hoy)
        self.stdout.write(self.style.SUCCESS(f"Facturas atrasadas: {total}"))
