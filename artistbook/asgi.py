"""
ASGI config for ArtistBook project.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "artistbook.settings.production")

application = get_asgi_application()
