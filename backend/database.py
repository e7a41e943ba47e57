from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from backend.config import settings

Base = declarative_base()


def _connect_args(url: str) -> dict:
    # SQLite connections are shared between Streamlit reruns and the reminder thread
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


def make_engine(url: str):
    """Create an engine for the given database URL"""
    return create_engine(url, connect_args=_connect_args(url))


engine = make_engine(settings.database_url)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(bind=None):
    """Create all tables if they do not exist"""
    # Import models so they register on Base.metadata
    import backend.models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
