"""
Review Model - One scraped chronicle, keyed by its page link.

created_at / updated_at drive outcome classification: a row whose two
timestamps are equal has only ever been inserted, any later save moves
updated_at forward.

Ratings belong to the review and are replaced wholesale on every re-ingest.
"""
from models.database import db
from datetime import datetime

from constants import Rarity


review_cut_videos = db.Table(
    'review_cut_videos',
    db.Column('review_id', db.Integer, db.ForeignKey('reviews.id', ondelete='CASCADE'), primary_key=True),
    db.Column('cut_video_id', db.Integer, db.ForeignKey('cut_videos.id', ondelete='CASCADE'), primary_key=True),
)

review_escale_videos = db.Table(
    'review_escale_videos',
    db.Column('review_id', db.Integer, db.ForeignKey('reviews.id', ondelete='CASCADE'), primary_key=True),
    db.Column('escale_video_id', db.Integer, db.ForeignKey('escale_videos.id', ondelete='CASCADE'), primary_key=True),
)

review_nanaroscope_videos = db.Table(
    'review_nanaroscope_videos',
    db.Column('review_id', db.Integer, db.ForeignKey('reviews.id', ondelete='CASCADE'), primary_key=True),
    db.Column('nanaroscope_video_id', db.Integer, db.ForeignKey('nanaroscope_videos.id', ondelete='CASCADE'), primary_key=True),
)


class Review(db.Model):
    __tablename__ = 'reviews'

    id = db.Column(db.Integer, primary_key=True)
    link = db.Column(db.Text, unique=True, nullable=False, index=True)

    # Titles
    title = db.Column(db.Text, nullable=False)
    original_title = db.Column(db.Text)
    alternative_titles = db.Column(db.JSON)  # None when the site says "Aucun"

    # Movie facts
    directors = db.Column(db.JSON, nullable=False, default=list)
    release_year = db.Column(db.Integer, index=True)
    origin_countries = db.Column(db.JSON, nullable=False, default=list)
    runtime_minutes = db.Column(db.Integer, nullable=False)

    # Chronicle facts
    creation_year = db.Column(db.Integer)
    rarity = db.Column(db.Enum(Rarity, name='rarity'), nullable=False)
    average_rating = db.Column(db.Float)
    poster_filename = db.Column(db.String(255))  # <sha256>.<ext> under the poster dir
    tmdb_id = db.Column(db.Integer, index=True)

    author_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    subgenre_id = db.Column(db.Integer, db.ForeignKey('subgenres.id'), nullable=False, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    author = db.relationship('User')
    subgenre = db.relationship('Subgenre')
    ratings = db.relationship(
        'Rating',
        back_populates='review',
        cascade='all, delete-orphan',
        lazy='select',
    )
    cut_videos = db.relationship('CutVideo', secondary=review_cut_videos, lazy='select')
    escale_videos = db.relationship('EscaleVideo', secondary=review_escale_videos, lazy='select')
    nanaroscope_videos = db.relationship('NanaroscopeVideo', secondary=review_nanaroscope_videos, lazy='select')

    @property
    def genre(self):
        return self.subgenre.genre if self.subgenre else None

    @property
    def was_updated(self) -> bool:
        """True once the row has been saved again after its first insert."""
        return self.created_at != self.updated_at

    def to_dict(self, include_relations=True):
        """Convert to dictionary for JSON serialization"""
        result = {
            'id': self.id,
            'link': self.link,
            'title': self.title,
            'original_title': self.original_title,
            'alternative_titles': self.alternative_titles,
            'directors': self.directors,
            'release_year': self.release_year,
            'origin_countries': self.origin_countries,
            'runtime_minutes': self.runtime_minutes,
            'creation_year': self.creation_year,
            'rarity': self.rarity.value if self.rarity else None,
            'average_rating': self.average_rating,
            'poster_filename': self.poster_filename,
            'tmdb_id': self.tmdb_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_relations:
            result.update({
                'author': self.author.username if self.author else None,
                'subgenre': self.subgenre.to_dict() if self.subgenre else None,
                'ratings': [r.to_dict() for r in self.ratings],
                'cut_videos': [v.to_dict() for v in self.cut_videos],
                'escale_videos': [v.to_dict() for v in self.escale_videos],
                'nanaroscope_videos': [v.to_dict() for v in self.nanaroscope_videos],
            })
        return result

    def __repr__(self):
        return f"<Review {self.id} {self.title}>"


class Rating(db.Model):
    __tablename__ = 'ratings'

    id = db.Column(db.Integer, primary_key=True)
    review_id = db.Column(
        db.Integer,
        db.ForeignKey('reviews.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    value = db.Column(db.Float, nullable=False)

    review = db.relationship('Review', back_populates='ratings')
    user = db.relationship('User', back_populates='ratings')

    __table_args__ = (
        db.UniqueConstraint('review_id', 'user_id', name='uq_rating_review_user'),
    )

    def to_dict(self):
        return {
            'username': self.user.username if self.user else None,
            'value': self.value,
        }

    def __repr__(self):
        return f"<Rating review={self.review_id} user={self.user_id} value={self.value}>"
