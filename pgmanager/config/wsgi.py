"""
WSGI config for the PG Manager backend.

The Socket.IO server wraps the Django application so both are served by one
process; requests outside /socket.io/ fall through to Django.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'pgmanager.config.settings')

django_app = get_wsgi_application()

import socketio  # noqa: E402

from pgmanager.realtime.server import sio  # noqa: E402

application = socketio.WSGIApp(sio, django_app)
