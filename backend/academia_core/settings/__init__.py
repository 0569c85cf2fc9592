# backend/academia_core/settings/__init__.py

import os

ENV = os.environ.get("DJANGO_ENV", "dev")  # default: dev

if ENV == "prod":
    from .prod import *
elif ENV == "local":
    from .local import *
else:
    from .dev import *
