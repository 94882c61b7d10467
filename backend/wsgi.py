"""
wsgi.py — Entry point for `flask run` and WSGI servers.

    flask --app backend.wsgi run
"""

import os

from backend.app import create_app

app = create_app(os.getenv("FLASK_ENV", "development"))
