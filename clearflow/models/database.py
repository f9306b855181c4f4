"""
Database extension shared by every model module
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def init_db(app) -> None:
    """Create all tables for the registered models"""
    with app.app_context():
        db.create_all()
