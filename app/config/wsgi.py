"""
WSGI entry point.

Uvicorn serves config.asgi in containers; this callable is for gunicorn
or mod_wsgi deployments that prefer WSGI.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
