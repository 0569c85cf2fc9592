# academia_core/settings/dev.py
from .base import *
import os
# Dev por ENV (no hardcode)
# DEBUG ya viene de base vía DJANGO_DEBUG

TENANT_STRICT_HOST = os.getenv("TENANT_STRICT_HOST", "False") == "True"
DEBUG_LOG_REQUESTS = os.getenv("DEBUG_LOG_REQUESTS", "False") == "True"
CORS_ALLOW_ALL_ORIGINS = True
