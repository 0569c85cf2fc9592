# apps/contratos_core/views.py
import logging

from django.db.models import Count, Q
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.common.permissions import EsDirector, EsEncargado
from apps.common.tenancy import academia_id_actual, exigir_academia, filtrar_por_academia
from apps.contratos_core.models import Contrato, FacturaContrato
from apps.contratos_core.serializers import (
    ContratoCrearSerializer,
    ContratoDetalleSerializer,
    ContratoEspecialSerializer,
    ContratoSerializer,
    FacturaContratoSerializer,
    FacturaEstadoSerializer,
    MatriculaGrupalSerializer,
    RangoFechasSerializer,
)
from apps.contratos_core.services.facturacion import (
    crear_contrato,
    crear_contrato_especial,
    encargado_de_academia,
    marcar_factura_pagada,
    matricular_con_contratos,
    matriculas_del_encargado,
    rango_para_matriculas,
)
from apps.cursos_core.models import Matricula
from apps.cursos_core.serializers import MatriculaSerializer

logger = logging.getLogger(__name__)


class ContratoViewSet(mixins.ListModelMixin,
                      mixins.RetrieveModelMixin,
                      viewsets.GenericViewSet):
    """
    Contratos de la academia (solo director / super_admin).

    - POST /contratos/                      → contrato con fechas y monto explícitos
    - POST /contratos/especial/             → a partir de pares (estudiante, curso)
    - POST /contratos/matricula-grupal/     → matrícula grupal + un contrato por encargado
    - POST /contratos/rango-fechas/         → rango sugerido para un conjunto de matrículas
    - PATCH /contratos/{id}/facturas/{fid}/ → marcar factura como pagada
    """
    permission_classes = [IsAuthenticated & EsDirector]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["encargado", "estado", "tipo"]

    def get_serializer_class(self):
        if self.action == "retrieve":
            return ContratoDetalleSerializer
        return ContratoSerializer

    def get_queryset(self):
        qs = (
            Contrato.objects
            .select_related("encargado")
            .annotate(
                facturas_count=Count("facturas", distinct=True),
                facturas_pendientes=Count("facturas", filter=Q(facturas__estado="pendiente"), distinct=True),
            )
            .order_by("-creado_en", "-id")
        )
        return filtrar_por_academia(qs, self.request)

    def _respuesta_alta(self, contrato):
        data = ContratoSerializer(self.get_queryset().get(pk=contrato.pk)).data
        data["facturas_creadas"] = contrato.facturas_creadas
        return data

    def create(self, request, *args, **kwargs):
        ser = ContratoCrearSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        datos = ser.validated_data
        academia = exigir_academia(request)

        encargado = encargado_de_academia(academia.id, datos["encargado_id"])
        matriculas = matriculas_del_encargado(encargado, datos["matricula_ids"])
        contrato = crear_contrato(
            academia, encargado, matriculas,
            monto_mensual=datos["monto_mensual"],
            fecha_inicio=datos["fecha_inicio"],
            fecha_fin=datos["fecha_fin"],
            notas=datos["notas"],
            creado_por=request.user,
        )
        return Response(self._respuesta_alta(contrato), status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"])
    def especial(self, request):
        ser = ContratoEspecialSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        datos = ser.validated_data
        academia = exigir_academia(request)

        encargado = encargado_de_academia(academia.id, datos["encargado_id"])
        contrato = crear_contrato_especial(
            academia, encargado, datos["items"],
            monto_mensual=datos["monto_mensual"],
            notas=datos["notas"],
            creado_por=request.user,
        )
        return Response(self._respuesta_alta(contrato), status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], url_path="matricula-grupal")
    def matricula_grupal(self, request):
        ser = MatriculaGrupalSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        academia = exigir_academia(request)

        matriculas, contratos = matricular_con_contratos(
            academia, ser.validated_data["curso_id"], ser.validated_data["estudiante_ids"], creado_por=request.user
        )
        return Response({
            "matriculas": [m.id for m in matriculas],
            "contratos": [self._respuesta_alta(c) for c in contratos],
        }, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], url_path="rango-fechas")
    def rango_fechas(self, request):
        ser = RangoFechasSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        qs = filtrar_por_academia(Matricula.objects.vigentes(), request)
        matriculas = list(qs.filter(id__in=ser.validated_data["matricula_ids"]).select_related("curso"))
        inicio, fin = rango_para_matriculas(matriculas)
        return Response({"fecha_inicio": inicio, "fecha_fin": fin})

    @action(detail=True, methods=["patch"], url_path=r"facturas/(?P<factura_id>\d+)")
    def factura(self, request, pk=None, factura_id=None):
        contrato = self.get_object()
        ser = FacturaEstadoSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        factura, cambio = marcar_factura_pagada(factura_id, contrato)
        data = FacturaContratoSerializer(factura).data
        if not cambio:
            data["mensaje"] = "La factura ya estaba pagada"
        return Response(data, status=status.HTTP_200_OK)


class EncargadoMatriculasView(APIView):
    """Matrículas vigentes de los hijos del encargado que todavía no están bajo contrato."""
    permission_classes = [IsAuthenticated & EsDirector]

    def get(self, request, encargado_id):
        academia = exigir_academia(request)
        encargado = encargado_de_academia(academia.id, encargado_id)

        matriculas = (
            Matricula.objects.vigentes()
            .filter(
                academia_id=encargado.academia_id,
                estudiante__deleted_at__isnull=True,
                estudiante__vinculos_encargados__encargado=encargado,
            )
            .exclude(vinculos_contratos__contrato__estado="activo")
            .select_related("estudiante", "curso__materia", "curso__periodo")
            .distinct()
        )
        return Response(MatriculaSerializer(matriculas, many=True).data)


class HogarFacturasView(APIView):
    """Facturas de los contratos del encargado autenticado, con estado derivado."""
    permission_classes = [IsAuthenticated & EsEncargado]

    def get(self, request):
        academia_id_actual(request)
        facturas = (
            FacturaContrato.objects
            .filter(contrato__encargado=request.user)
            .select_related("contrato")
            .order_by("mes", "id")
        )
        return Response(FacturaContratoSerializer(facturas, many=True).data)
