"""
Models package - SQLAlchemy models
"""
from models.database import db
from models.genre import Genre, Subgenre
from models.user import User
from models.video import CutVideo, EscaleVideo, NanaroscopeVideo
from models.review import Review, Rating

__all__ = [
    'db',
    'Genre',
    'Subgenre',
    'User',
    'CutVideo',
    'EscaleVideo',
    'NanaroscopeVideo',
    'Review',
    'Rating',
]
