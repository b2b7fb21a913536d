# backend/wsgi.py
"""
WSGI config for the POS lifecycle backend.
Defaults to dev settings unless DJANGO_SETTINGS_MODULE is set externally.

Each WSGI worker thread shares the process-wide lifecycle engine
(core.engine.get_engine), so the admission cap applies per process.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings.dev")

application = get_wsgi_application()
