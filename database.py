# database.py
"""
SQLAlchemy database connection and session management.

This module provides:
- Database engine configuration for MySQL (PyMySQL driver)
- Session factory for dependency injection
- Schema bootstrap and default seed data

Usage:
     from database import get_session, engine

     # In FastAPI routes:
     @router.get("/items")
     def get_items(db: Session = Depends(get_session)):
          return db.query(Item).all()
"""
import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool

from config import settings

logger = logging.getLogger(__name__)

if settings.DATABASE_URL.startswith("sqlite"):
     engine = create_engine(
          settings.DATABASE_URL,
          connect_args={"check_same_thread": False},
          echo=settings.SQL_ECHO,
     )
else:
     engine = create_engine(
          settings.DATABASE_URL,
          poolclass=QueuePool,
          pool_size=10,
          max_overflow=10,
          pool_timeout=30,
          pool_recycle=1800,  # Recycle connections after 30 minutes
          pool_pre_ping=True,
          echo=settings.SQL_ECHO,
     )

# Session factory
SessionLocal = sessionmaker(
     bind=engine,
     autocommit=False,
     autoflush=False,
     expire_on_commit=False,
)

DEFAULT_PACKAGES = (
     ("Basic", Decimal("1000.00"), "Entry level package"),
     ("Standard", Decimal("2500.00"), "Most popular package"),
     ("Premium", Decimal("5000.00"), "Top tier package with extras"),
)


def get_session() -> Generator[Session, None, None]:
     """
     FastAPI dependency that provides a database session.

     The session is committed when the request handler returns normally,
     rolled back on any exception, and always returned to the pool.

     Yields:
          Session: SQLAlchemy database session
     """
     session = SessionLocal()
     try:
          yield session
          session.commit()
     except Exception:
          session.rollback()
          raise
     finally:
          session.close()


@contextmanager
def get_session_context() -> Generator[Session, None, None]:
     """
     Context manager for database sessions (for use outside FastAPI routes).

     Usage:
          with get_session_context() as db:
               users = db.query(User).all()
     """
     session = SessionLocal()
     try:
          yield session
          session.commit()
     except Exception:
          session.rollback()
          raise
     finally:
          session.close()


def init_db() -> None:
     """
     Initialize database tables.

     Creates all tables defined in the models if they don't exist.
     For production, use Alembic migrations instead.
     """
     from models import Base
     Base.metadata.create_all(bind=engine)


def seed_defaults(db: Session) -> None:
     """Insert the default packages and the bootstrap super admin when missing."""
     from models import Package, User
     from models.user import UserRole
     from dependencies import hash_password

     if db.query(Package).count() == 0:
          logger.info("Seeding default packages")
          for name, amount, description in DEFAULT_PACKAGES:
               db.add(Package(name=name, amount=amount, description=description))

     admin = db.query(User).filter(User.email == settings.DEFAULT_ADMIN_EMAIL).first()
     if admin is None:
          db.add(User(
               name="Super Admin",
               email=settings.DEFAULT_ADMIN_EMAIL,
               password=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
               role=UserRole.SUPER_ADMIN,
          ))
          logger.warning(
               "Default super admin created (%s); change its password", settings.DEFAULT_ADMIN_EMAIL
          )
     db.flush()


def check_connection() -> bool:
     """
     Test database connectivity.

     Returns:
          bool: True if connection successful, False otherwise
     """
     try:
          with engine.connect() as conn:
               conn.execute(text("SELECT 1"))
          return True
     except Exception as e:
          logger.error("Database connection failed: %s", e)
          return False
