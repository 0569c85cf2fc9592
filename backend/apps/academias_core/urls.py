from django.urls import path
from rest_framework.routers import DefaultRouter

from apps.academias_core.views import AcademiaViewSet, tenant_config

router = DefaultRouter()
router.register(r"academias", AcademiaViewSet, basename="academias")

urlpatterns = [
    path("tenant/config/", tenant_config, name="tenant-config"),
] + router.urls
