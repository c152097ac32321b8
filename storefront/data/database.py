# storefront/data/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from storefront.utils.settings import DATABASE_URL, DB_TIMEOUT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def connect_args_for(url: str, timeout: float = DB_TIMEOUT_SECONDS) -> dict:
    if url.startswith("sqlite"):
        # sqlite's timeout is how long a write waits for the file lock
        return {"check_same_thread": False, "timeout": timeout}
    if url.startswith("postgresql"):
        return {
            "connect_timeout": max(1, int(timeout)),
            "options": f"-c statement_timeout={int(timeout * 1000)}",
        }
    return {}


engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,
    pool_timeout=DB_TIMEOUT_SECONDS,
    connect_args=connect_args_for(DATABASE_URL),
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    # models must be imported so they register in Base.metadata
    import storefront.data.models  # noqa: F401

    logger.info(f"Creating tables: {sorted(Base.metadata.tables.keys())}")
    Base.metadata.create_all(bind=engine)
