import logging
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import SQLAlchemyError

db = SQLAlchemy()

log = logging.getLogger(__name__)


def _utcnow():
    # naive UTC; SQLite's DATETIME has no zone
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Entry(db.Model):
    __tablename__ = "entries"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    created_at = db.Column(db.DateTime, default=_utcnow, nullable=False, index=True)

    sleep = db.Column(db.Float)
    study_hours = db.Column(db.Float)
    deadlines = db.Column(db.Integer)
    mood = db.Column(db.Integer)          # stored, not scored
    stress = db.Column(db.Integer)
    exercise = db.Column(db.Boolean)

    score = db.Column(db.Float)
    level = db.Column(db.Text)
    advice = db.Column(db.Text)

    def __repr__(self):
        return f"<Entry id={self.id} score={self.score}>"


class EntryStore:
    """Append-only access to the `entries` table."""

    def __init__(self, database=db):
        self.db = database

    def initialize(self, reset=True):
        """
        Make sure the entries table exists.

        With reset=True the table is dropped first, so every start wipes
        the history. Needs an app context.
        """
        if reset:
            log.warning("Dropping and recreating table %r: all stored entries are discarded",
                        Entry.__tablename__)
            Entry.__table__.drop(self.db.engine, checkfirst=True)
        self.db.create_all()

    def append(self, entry):
        """Insert one entry and commit. Returns it with id/created_at filled in."""
        try:
            self.db.session.add(entry)
            self.db.session.commit()
        except SQLAlchemyError:
            self.db.session.rollback()
            raise
        return entry

    def count(self):
        return Entry.query.count()

    def recent_series(self, limit=10):
        """
        Last `limit` entries as (created_at, score) pairs, oldest first.

        Rows whose timestamp or score can't be decoded are left out.
        """
        rows = (
            Entry.query
            .with_entities(self.db.cast(Entry.created_at, self.db.String), Entry.score)
            .order_by(Entry.created_at.desc(), Entry.id.desc())
            .limit(limit)
            .all()
        )

        series = []
        for raw_ts, raw_score in reversed(rows):
            try:
                ts = datetime.fromisoformat(raw_ts)
                score = float(raw_score)
            except (TypeError, ValueError):
                log.debug("Skipping undecodable row: %r, %r", raw_ts, raw_score)
                continue
            series.append((ts, score))
        return series
