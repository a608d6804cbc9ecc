"""
Database configuration and session management for Training Hub.

Sets up SQLAlchemy engine, session factory, and base model.
"""

from typing import Generator
from sqlalchemy import create_engine, event, MetaData, text
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
import logging

from .config import settings


# Configure logging
logger = logging.getLogger(__name__)


# SQLAlchemy metadata conventions for better constraint naming
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}

metadata = MetaData(naming_convention=convention)


# Create engine based on environment
if settings.TESTING:
    # Use in-memory SQLite for testing
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    # Use PostgreSQL for development/production
    engine = create_engine(
        settings.DATABASE_URL,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=10,        # Number of connections to maintain
        max_overflow=20,     # Maximum overflow connections
        echo=settings.DEBUG, # Log SQL statements if in debug mode
    )


if engine.dialect.name == "sqlite":
    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        # SQLite ignores ON DELETE clauses unless this is set per connection
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


# Base class for models
Base = declarative_base(metadata=metadata)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency to get database session.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(db: Session) -> None:
    """
    Initialize database with required data.

    Creates the first admin account when no user with the configured
    admin email exists yet.

    Args:
        db: Database session
    """
    from app.models.user import User, UserRole
    from app.core.security import get_password_hash

    admin_user = db.query(User).filter(
        User.email == settings.FIRST_ADMIN_EMAIL
    ).first()

    if not admin_user:
        admin_user = User(
            email=settings.FIRST_ADMIN_EMAIL,
            username=settings.FIRST_ADMIN_USERNAME,
            hashed_password=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
            role=UserRole.ADMIN.value,
            first_name="System",
            last_name="Administrator",
        )
        db.add(admin_user)
        db.commit()
        logger.info(f"Admin user created: {settings.FIRST_ADMIN_EMAIL}")


def check_database_connection() -> bool:
    """
    Check if database is accessible.

    Returns:
        bool: True if database is accessible, False otherwise
    """
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False


class DatabaseManager:
    """
    Database manager for handling schema operations.
    """

    @staticmethod
    def create_all_tables():
        """Create all database tables."""
        import app.models  # noqa: F401  (registers models on the metadata)
        Base.metadata.create_all(bind=engine)
        logger.info("All database tables created successfully")
