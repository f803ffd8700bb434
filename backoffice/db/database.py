from sqlmodel import SQLModel, create_engine, Session
from typing import Generator
import os
from backoffice.config.config import settings
from loguru import logger

# Registers every table on SQLModel.metadata
from backoffice.models import models  # noqa: F401

# Create database directory if it doesn't exist
def ensure_db_directory():
    """Ensure the database directory exists"""
    if settings.DATABASE_URL.startswith("sqlite:///"):
        db_path = settings.DATABASE_URL.replace('sqlite:///', '')
        db_dir = os.path.dirname(db_path)
        if db_dir:  # Only create directory if there's a path
            os.makedirs(db_dir, exist_ok=True)

def build_engine(url: str, echo: bool = False):
    """Create an engine; pool tuning only applies to server databases"""
    if url.startswith("sqlite"):
        return create_engine(url, echo=echo, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        echo=echo,
        pool_size=10,
        max_overflow=20,
        pool_recycle=3600,
        pool_pre_ping=True
    )

ensure_db_directory()

# Create database engine
engine = build_engine(settings.DATABASE_URL, echo=settings.DB_ECHO_LOG)

# Create database session
def get_session() -> Generator[Session, None, None]:
    with Session(engine) as session:
        try:
            yield session
        except Exception as e:
            session.rollback()
            logger.error(f"Database session error: {str(e)}")
            raise

# Create database tables
def create_db_and_tables(bind=None):
    bind = bind or engine
    logger.info(f"Creating database tables using {bind.url}")
    SQLModel.metadata.create_all(bind)

# Initialize database
async def init_db():
    """Create tables on startup"""
    create_db_and_tables()
    logger.info("Database initialized")
