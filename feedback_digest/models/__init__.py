from .database import Base, engine, SessionLocal, create_session_factory, init_db
from .feedback import Feedback
from .digest import DailyDigest

__all__ = [
    'Base', 'engine', 'SessionLocal', 'create_session_factory', 'init_db',
    'Feedback', 'DailyDigest'
]
