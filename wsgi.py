"""
WSGI entry point and Flask-Migrate / Alembic target.

Usage:
    flask --app wsgi db upgrade
    flask --app wsgi create-admin --email admin@example.org
    gunicorn wsgi:app
"""

from showcase import create_app

app = create_app()
