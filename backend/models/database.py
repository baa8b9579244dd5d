"""
Database instance shared by every model.

Bound to the Flask app in create_app() via db.init_app(app).
"""
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
