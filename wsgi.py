#!/usr/bin/env python3
"""WSGI entry point, e.g. `gunicorn wsgi:app`"""

from canvass.app import create_app
from canvass.config.settings import settings

settings.validate()
app = create_app()

if __name__ == "__main__":
    app.run(host=settings.API_HOST, port=settings.API_PORT)
