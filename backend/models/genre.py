"""
Genre / Subgenre Models - Two-level chronicle classification.

Both are created lazily on first sight and looked up by title afterwards
(titles are unique, entries are never duplicated).
"""
from models.database import db
from datetime import datetime


class Genre(db.Model):
    __tablename__ = 'genres'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), unique=True, nullable=False, index=True)
    link = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    subgenres = db.relationship('Subgenre', back_populates='genre', lazy='select')

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'link': self.link,
        }

    def __repr__(self):
        return f"<Genre {self.title}>"


class Subgenre(db.Model):
    __tablename__ = 'subgenres'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), unique=True, nullable=False, index=True)
    link = db.Column(db.Text, nullable=False)
    genre_id = db.Column(
        db.Integer,
        db.ForeignKey('genres.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    genre = db.relationship('Genre', back_populates='subgenres')

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'link': self.link,
            'genre': self.genre.to_dict() if self.genre else None,
        }

    def __repr__(self):
        return f"<Subgenre {self.title}>"
