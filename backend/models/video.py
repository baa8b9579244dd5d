"""
Video Models - Three kinds of videos attached to a chronicle.

- CutVideo: excerpt hosted on the site, keyed by the site's numeric id
- EscaleVideo: "Escale à Nanarland" episode, keyed by its episode number
- NanaroscopeVideo: "Nanaroscope" episode, keyed by its S##E## code

Videos can be shared between chronicles (many-to-many with reviews).
"""
from models.database import db


class CutVideo(db.Model):
    __tablename__ = 'cut_videos'

    # Site-provided id, not generated
    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    title = db.Column(db.Text, nullable=False)
    average_rating = db.Column(db.Float, nullable=False)
    media_links = db.Column(db.JSON, nullable=False, default=list)  # [{"src": ..., "type": ...}]

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'average_rating': self.average_rating,
            'media_links': self.media_links,
        }

    def __repr__(self):
        return f"<CutVideo {self.id} {self.title}>"


class EscaleVideo(db.Model):
    __tablename__ = 'escale_videos'

    # Episode number ("N°12")
    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    title = db.Column(db.Text, nullable=False)
    page_link = db.Column(db.Text, nullable=False)
    publication_date = db.Column(db.Date, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'page_link': self.page_link,
            'publication_date': self.publication_date.isoformat() if self.publication_date else None,
        }

    def __repr__(self):
        return f"<EscaleVideo {self.id} {self.title}>"


class NanaroscopeVideo(db.Model):
    __tablename__ = 'nanaroscope_videos'

    id = db.Column(db.Integer, primary_key=True)
    season_episode_code = db.Column(db.String(16), unique=True, nullable=False, index=True)  # S01E03
    tagline = db.Column(db.Text, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'season_episode_code': self.season_episode_code,
            'tagline': self.tagline,
        }

    def __repr__(self):
        return f"<NanaroscopeVideo {self.season_episode_code}>"
