# apps/contratos_core/urls.py
from django.urls import path
from rest_framework.routers import DefaultRouter

from apps.contratos_core.views import ContratoViewSet, EncargadoMatriculasView, HogarFacturasView

router = DefaultRouter()
router.register(r"contratos", ContratoViewSet, basename="contratos")

urlpatterns = [
    path(
        "contratos/encargados/<int:encargado_id>/matriculas/",
        EncargadoMatriculasView.as_view(),
        name="contratos-encargado-matriculas",
    ),
    path("hogar/facturas/", HogarFacturasView.as_view(), name="hogar-facturas"),
] + router.urls
