import os
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///feedback_digest.db")

def create_session_factory(database_url: str) -> sessionmaker:
    """Create an engine and session factory for the given database URL."""
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # In-memory SQLite must share one connection across sessions
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(database_url, pool_pre_ping=True)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)

SessionLocal = create_session_factory(DATABASE_URL)
engine = SessionLocal.kw["bind"]

def init_db(session_factory: sessionmaker = None):
    """Create all tables for the given session factory (default: SessionLocal)."""
    factory = session_factory or SessionLocal
    Base.metadata.create_all(bind=factory.kw["bind"])
