from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def create_session_factory(database_url: str, timeout: float = 5.0) -> sessionmaker:
    """Build an engine for `database_url`, create missing tables and return a session factory."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # FastAPI serves sync endpoints from a thread pool
        connect_args = {"check_same_thread": False, "timeout": timeout}

    engine = create_engine(database_url, connect_args=connect_args, pool_pre_ping=True)

    # models must be imported so their tables are registered on Base.metadata
    import models.Itinerary  # noqa: F401
    import models.LibraryItem  # noqa: F401

    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
