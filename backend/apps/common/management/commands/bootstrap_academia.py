# apps/common/management/commands/bootstrap_academia.py
import logging

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import BaseCommand
from django.db import transaction

logger = logging.getLogger(__name__)
User = get_user_model()

RUBRICAS_BASE = ["Ritmo", "Afinación", "Técnica", "Interpretación"]
ESCALAS_BASE = [("Inicial", 1), ("En proceso", 2), ("Logrado", 3), ("Destacado", 4)]


class Command(BaseCommand):
    help = "Bootstrap: super_admin, academia demo con dominio, director y rúbricas/escalas por defecto."

    def add_arguments(self, parser):
        parser.add_argument("--super-email", default="admin@academia.local")
        parser.add_argument("--super-pass", default="sadmin123")
        parser.add_argument("--academia-nombre", default="Academia Demo")
        parser.add_argument("--director-email", default="director@academia.local")
        parser.add_argument("--director-pass", default="director123")
        parser.add_argument("--domains", default="localhost", help="Hostnames coma-separados de la academia")
        parser.add_argument("--skip-migrate", action="store_true", help="No ejecutar 'migrate' antes del bootstrap.")

    def handle(self, *args, **opts):
        # migraciones fuera de la transacción
        if not opts["skip_migrate"]:
            self.stdout.write(self.style.WARNING("[bootstrap] Ejecutando 'migrate'..."))
            call_command("migrate", interactive=False, verbosity=1)

        from apps.academias_core.models import Academia, AcademiaDominio
        from apps.aula_core.models import Escala, Rubrica

        with transaction.atomic():
            # 1) super admin
            if not User.objects.filter(email=opts["super_email"]).exists():
                root = User.objects.create_superuser(
                    email=opts["super_email"], password=opts["super_pass"], nombre="Super", apellido="Admin",
                )
                logger.info("[bootstrap] super_admin creado id=%s", root.id)

            # 2) academia + dominios
            academia, creada = Academia.objects.vigentes().get_or_create(nombre=opts["academia_nombre"])
            logger.info("[bootstrap] academia %s id=%s", "creada" if creada else "existente", academia.id)

            domains = [d.strip().lower() for d in opts["domains"].split(",") if d.strip()]
            for i, host in enumerate(domains):
                AcademiaDominio.objects.update_or_create(
                    hostname=host, defaults={"academia": academia, "is_primary": i == 0, "activo": True}
                )

            # 3) director
            if not User.objects.filter(email=opts["director_email"]).exists():
                User.objects.create_user(
                    email=opts["director_email"], password=opts["director_pass"],
                    nombre="Director", rol="director", academia=academia,
                )

            # 4) catálogos de evaluación
            for orden, nombre in enumerate(RUBRICAS_BASE):
                Rubrica.objects.get_or_create(academia=academia, nombre=nombre, defaults={"orden": orden})
            for orden, (nombre, valor) in enumerate(ESCALAS_BASE):
                Escala.objects.get_or_create(academia=academia, valor=valor, defaults={"nombre": nombre, "orden": orden})

        self.stdout.write(self.style.SUCCESS("Bootstrap OK"))
        self.stdout.write(self.style.SUCCESS(f"SuperAdmin: {opts['super_email']}"))
        self.stdout.write(self.style.SUCCESS(f"Director:   {opts['director_email']}"))
        self.stdout.write(self.style.SUCCESS(f"Dominios:   {', '.join(domains)}"))
