# academia_core/settings/local.py
# Corre contra sqlite sin variables de entorno; útil para levantar el admin rápido.
from .dev import *

DEBUG = True
DATABASES = {'default': {'ENGINE': 'django.db.backends.sqlite3', 'NAME': BASE_DIR / '../db.sqlite3'}}
ALLOWED_HOSTS = ['*']
