"""
PostgreSQL database access

This module centralizes every way the backend talks to the database:
- psycopg2 direct connections (all runtime queries, via repositories)
- SQLAlchemy engine + declarative Base (table definitions and schema creation)

Author: Tawabil Engineering
Updated: 2026-01-20
"""
import time
import logging
from contextlib import contextmanager
from functools import lru_cache

import psycopg2
from psycopg2.extras import RealDictCursor
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base

from .config import settings

logger = logging.getLogger(__name__)


# ============================================================================
# SQLAlchemy Configuration (schema definitions only)
# ============================================================================

# Base para modelos
Base = declarative_base()


@lru_cache(maxsize=1)
def get_engine():
    """
    Build the SQLAlchemy engine on first use

    The engine is only needed by schema scripts (create_all), so it is not
    created at import time.
    """
    database_url = _require_database_url()
    return create_engine(
        database_url,
        pool_pre_ping=True,  # Check connection before use
    )


def init_db():
    """Create all tables declared in app.models (no-op for existing tables)"""
    # Register models on Base.metadata
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())
    logger.info("Database schema ensured")


# ============================================================================
# psycopg2 Direct Connections (for raw SQL queries)
# ============================================================================

def _require_database_url() -> str:
    database_url = settings.DATABASE_URL
    if not database_url:
        raise Exception("DATABASE_URL not configured")
    return database_url


def get_db_connection_dict():
    """
    Get a database connection with RealDictCursor (returns dictionaries)

    Use this for:
    - Repository queries (rows map straight onto domain models)
    - API responses (easier to serialize to JSON)

    Returns:
        psycopg2 connection with RealDictCursor

    Example:
        conn = get_db_connection_dict()
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM orders")
        results = cursor.fetchall()  # Returns list of dicts
        cursor.close()
        conn.close()
    """
    return psycopg2.connect(_require_database_url(), cursor_factory=RealDictCursor)


def get_db_connection_dict_with_retry(max_retries=3, retry_delay=1.0):
    """
    Get a psycopg2 connection with RealDictCursor and automatic retry

    Handles intermittent connection failures by:
    - Retrying failed connections up to max_retries times
    - Adding exponential backoff between retries
    - Logging connection attempts for debugging

    Args:
        max_retries: Maximum number of connection attempts (default: 3)
        retry_delay: Initial delay between retries in seconds (default: 1.0)

    Returns:
        psycopg2 connection with RealDictCursor

    Raises:
        psycopg2.OperationalError: If all retry attempts fail
    """
    database_url = _require_database_url()

    last_error = None

    for attempt in range(1, max_retries + 1):
        try:
            logger.debug(f"Database connection attempt {attempt}/{max_retries}")
            conn = psycopg2.connect(database_url, cursor_factory=RealDictCursor)

            # Test connection with a simple query
            cursor = conn.cursor()
            cursor.execute("SELECT 1")
            cursor.close()

            logger.debug(f"Database connection successful on attempt {attempt}")
            return conn

        except psycopg2.OperationalError as e:
            last_error = e
            error_msg = str(e)

            if "SSL connection has been closed unexpectedly" in error_msg:
                logger.warning(f"SSL connection error on attempt {attempt}/{max_retries}: {error_msg}")
            else:
                logger.warning(f"Connection error on attempt {attempt}/{max_retries}: {error_msg}")

            if attempt < max_retries:
                # Exponential backoff
                delay = retry_delay * (2 ** (attempt - 1))
                logger.info(f"Retrying in {delay:.2f} seconds...")
                time.sleep(delay)
            else:
                logger.error(f"All {max_retries} connection attempts failed")
                raise last_error

    raise last_error if last_error else Exception("Connection failed after all retries")


@contextmanager
def transaction():
    """
    Context manager for a unit of work on a single connection

    Commits when the block succeeds, rolls back and re-raises otherwise,
    and always closes the connection.

    Usage:
        with transaction() as conn:
            customer_repo.find_or_create(..., conn=conn)
            order_repo.create(order, conn=conn)
    """
    conn = get_db_connection_dict_with_retry()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
