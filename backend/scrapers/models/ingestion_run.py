"""
Ingestion Run Model - Job tracking for batch chronicle ingestion.

Tracks:
- Run lifecycle (running -> completed/failed)
- Statistics (links discovered, candidates, inserted, updated)
- Configuration snapshot for reproducibility
"""
from datetime import datetime
from uuid import uuid4
from models.database import db


class IngestionRun(db.Model):
    """Tracks individual batch ingestion executions."""

    __tablename__ = "ingestion_runs"

    id = db.Column(db.Integer, primary_key=True)
    run_id = db.Column(
        db.String(36),
        unique=True,
        nullable=False,
        default=lambda: str(uuid4()),
        index=True,
    )

    scraper_name = db.Column(db.String(100), nullable=False, index=True)
    source_domain = db.Column(db.String(255), nullable=False)

    # Run lifecycle
    status = db.Column(
        db.String(20),
        nullable=False,
        default="pending",
        index=True,
    )  # pending, running, completed, failed
    started_at = db.Column(db.DateTime)
    completed_at = db.Column(db.DateTime)

    # Run statistics
    links_discovered = db.Column(db.Integer, default=0)
    candidates = db.Column(db.Integer, default=0)
    items_inserted = db.Column(db.Integer, default=0)
    items_updated = db.Column(db.Integer, default=0)

    # Configuration snapshot (delay, max_count, update, ignore_cache)
    config_snapshot = db.Column(db.JSON, nullable=False, default=dict)

    # Error tracking
    failed_link = db.Column(db.Text)
    error_message = db.Column(db.Text)
    error_traceback = db.Column(db.Text)

    triggered_by = db.Column(db.String(50), default="manual")  # manual, cron, api
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.Index("ix_ingestion_runs_scraper_started", "scraper_name", "started_at"),
        db.CheckConstraint(
            "status IN ('pending', 'running', 'completed', 'failed')",
            name="ingestion_runs_status_check",
        ),
    )

    def start(self):
        """Mark run as started."""
        self.status = "running"
        self.started_at = datetime.utcnow()

    def complete(self, stats: dict = None):
        """Mark run as completed with stats."""
        self.status = "completed"
        self.completed_at = datetime.utcnow()
        if stats:
            self._apply_stats(stats)

    def fail(self, error: Exception, stats: dict = None, failed_link: str = None):
        """Mark run as failed with error."""
        import traceback

        self.status = "failed"
        self.completed_at = datetime.utcnow()
        self.error_message = str(error)
        self.error_traceback = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
        self.failed_link = failed_link
        if stats:
            self._apply_stats(stats)

    def _apply_stats(self, stats: dict):
        self.links_discovered = stats.get("links_discovered", self.links_discovered)
        self.candidates = stats.get("candidates", self.candidates)
        self.items_inserted = stats.get("items_inserted", self.items_inserted)
        self.items_updated = stats.get("items_updated", self.items_updated)

    @property
    def duration_seconds(self) -> float:
        """Calculate run duration in seconds."""
        if not self.started_at:
            return 0
        end = self.completed_at or datetime.utcnow()
        return (end - self.started_at).total_seconds()

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "run_id": self.run_id,
            "scraper_name": self.scraper_name,
            "source_domain": self.source_domain,
            "status": self.status,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "links_discovered": self.links_discovered,
            "candidates": self.candidates,
            "items_inserted": self.items_inserted,
            "items_updated": self.items_updated,
            "config": self.config_snapshot,
            "triggered_by": self.triggered_by,
            "failed_link": self.failed_link,
            "error_message": self.error_message,
        }

    def __repr__(self):
        return f"<IngestionRun {self.run_id[:8]} {self.scraper_name} {self.status}>"
