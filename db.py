# db.py - SQLAlchemy engine and session
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

engine = None
SessionLocal = None


def init_engine(database_url):
    """Create the engine and session factory; called once at startup."""
    global engine, SessionLocal
    connect_args = {}
    if database_url.startswith("sqlite"):
        # TestClient and uvicorn's threadpool hand sessions across threads
        connect_args["check_same_thread"] = False
    engine = create_engine(database_url, echo=False, future=True, connect_args=connect_args)
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
    return engine
