"""
Architectural Showcase Portal
SQLAlchemy models package.

Usage:
    from showcase.models import db
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
