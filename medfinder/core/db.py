"""Database helpers for saved medical professionals."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional

import psycopg2
from psycopg2 import extras, pool

from medfinder.core.config import ConfigError, get_settings
from medfinder.models import MedicalProfessional, SaveResult

logger = logging.getLogger(__name__)

_connection_pool: Optional[pool.ThreadedConnectionPool] = None


def init_pool(minconn: int = 1, maxconn: int = 5) -> pool.ThreadedConnectionPool:
    """Initialise and return the shared connection pool."""
    global _connection_pool
    if _connection_pool is None:
        settings = get_settings()
        if not settings.database_url:
            raise ConfigError("DATABASE_URL is required for database connections")
        _connection_pool = pool.ThreadedConnectionPool(
            minconn,
            maxconn,
            dsn=settings.database_url,
            connect_timeout=10,
        )
        logger.info("Database connection pool initialised")
    return _connection_pool


@contextmanager
def get_connection(pg_pool: Optional[pool.AbstractConnectionPool] = None):
    """Context manager yielding a pooled connection."""
    pg_pool = pg_pool or init_pool()
    conn = pg_pool.getconn()
    try:
        yield conn
    finally:
        pg_pool.putconn(conn)


def _prepare_params(professional: MedicalProfessional) -> Dict[str, Any]:
    return {
        "name": professional.name,
        "address": professional.address,
        "workplace": professional.workplace,
        "phone": professional.phone,
        "specialty": professional.specialty,
        "latitude": professional.latitude,
        "longitude": professional.longitude,
        "distance": professional.distance,
    }


_INSERT_PROFESSIONAL = """
INSERT INTO medical_professionals (
    name,
    address,
    workplace,
    phone,
    specialty,
    latitude,
    longitude,
    distance
) VALUES (
    %(name)s,
    %(address)s,
    %(workplace)s,
    %(phone)s,
    %(specialty)s,
    %(latitude)s,
    %(longitude)s,
    %(distance)s
)
RETURNING id, created_at;
"""

_SELECT_SAVED = """
SELECT id, name, address, workplace, phone, specialty, latitude, longitude, distance, created_at
FROM medical_professionals
ORDER BY created_at DESC;
"""


def insert_professionals(
    professionals: Iterable[MedicalProfessional],
    pg_pool: Optional[pool.AbstractConnectionPool] = None,
) -> List[MedicalProfessional]:
    """Insert records in one transaction and return them with storage-issued ids."""
    professionals = list(professionals)
    saved: List[MedicalProfessional] = []
    with get_connection(pg_pool) as conn:
        try:
            with conn.cursor() as cur:
                for professional in professionals:
                    cur.execute(_INSERT_PROFESSIONAL, _prepare_params(professional))
                    record_id, created_at = cur.fetchone()
                    saved.append(professional.with_persisted(record_id, created_at))
            conn.commit()
        except Exception:
            conn.rollback()
            raise
    logger.debug("Inserted %d medical professionals", len(saved))
    return saved


def save_professionals(
    professionals: Iterable[MedicalProfessional],
    pg_pool: Optional[pool.AbstractConnectionPool] = None,
) -> SaveResult:
    """Persist a batch, reporting failures in the result instead of raising."""
    try:
        saved = insert_professionals(professionals, pg_pool)
    except (ConfigError, psycopg2.Error) as exc:
        logger.error("Error saving professionals: %s", exc)
        return SaveResult(success=False, error=str(exc))
    return SaveResult(success=True, data=saved)


def save_professional(
    professional: MedicalProfessional,
    pg_pool: Optional[pool.AbstractConnectionPool] = None,
) -> SaveResult:
    return save_professionals([professional], pg_pool)


def list_saved_professionals(pg_pool: Optional[pool.AbstractConnectionPool] = None) -> List[MedicalProfessional]:
    """Previously saved records, newest first."""
    with get_connection(pg_pool) as conn:
        with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
            cur.execute(_SELECT_SAVED)
            rows = cur.fetchall()
    return [MedicalProfessional.from_dict(row) for row in rows]
