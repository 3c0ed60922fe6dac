"""
WSGI entrypoint (gunicorn wsgi:app from the backend directory)
"""
from keyhub import create_app

# Gunicorn entrypoint
app = create_app()
