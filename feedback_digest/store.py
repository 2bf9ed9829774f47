import json
import logging
from typing import List, Dict, Any, Optional
from sqlalchemy.orm import sessionmaker
from feedback_digest.models.database import SessionLocal
from feedback_digest.models.feedback import Feedback
from feedback_digest.models.digest import DailyDigest

logger = logging.getLogger(__name__)

DEFAULT_FEEDBACK_LIMIT = 50

class FeedbackStore:
    """Feedback and digest persistence.

    Every operation opens its own session so concurrent runs never share
    ORM state.
    """

    def __init__(self, session_factory: sessionmaker = None):
        self.session_factory = session_factory or SessionLocal

    def add_feedback(self, content: str, source: Optional[str] = None) -> int:
        """Insert a raw feedback row and return its id."""
        if not content or not content.strip():
            raise ValueError("Feedback content must not be empty")

        db = self.session_factory()
        try:
            feedback = Feedback(content=content, source=source)
            db.add(feedback)
            db.commit()
            return feedback.id
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def select_recent_feedback(self, limit: int = DEFAULT_FEEDBACK_LIMIT) -> List[Dict[str, Any]]:
        """Return up to `limit` feedback items, most recent first."""
        db = self.session_factory()
        try:
            rows = db.query(Feedback).order_by(
                Feedback.created_at.desc(), Feedback.id.desc()
            ).limit(limit).all()
            return [row.to_item() for row in rows]
        finally:
            db.close()

    def insert_digest(self, summary: str, feedback_count: int) -> int:
        """Persist a serialized digest payload and return the new row id."""
        db = self.session_factory()
        try:
            digest = DailyDigest(summary=summary, feedback_count=feedback_count)
            db.add(digest)
            db.commit()
            logger.info(f"Stored digest {digest.id} covering {feedback_count} feedback items")
            return digest.id
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def select_latest_digest(self) -> Optional[Dict[str, Any]]:
        """Return the most recently created digest row, or None."""
        db = self.session_factory()
        try:
            row = db.query(DailyDigest).order_by(
                DailyDigest.created_at.desc(), DailyDigest.id.desc()
            ).first()
            if not row:
                return None
            return {
                'id': row.id,
                'summary': row.summary,
                'feedback_count': row.feedback_count,
                'created_at': row.created_at.isoformat() if row.created_at else None
            }
        finally:
            db.close()

    def count_digests(self) -> int:
        """Count stored digest rows."""
        db = self.session_factory()
        try:
            return db.query(DailyDigest).count()
        finally:
            db.close()

    def latest_digest_view(self) -> Optional[Dict[str, Any]]:
        """Latest digest flattened for API responses: id, payload fields, count, timestamp."""
        record = self.select_latest_digest()
        if record is None:
            return None
        view = {'id': record['id']}
        view.update(json.loads(record['summary']))
        view['feedback_count'] = record['feedback_count']
        view['created_at'] = record['created_at']
        return view
