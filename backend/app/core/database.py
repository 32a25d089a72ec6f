"""
Configuration de la base de données
Gestion des connexions, sessions et métadonnées SQLAlchemy
PostgreSQL en production, SQLite (mémoire) pour les tests
"""

import logging
import math
import sqlite3
import time
from collections import deque
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Generator, Iterator, Optional

from sqlalchemy import MetaData, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from app.core.config import settings

# ================================
# LOGGING
# ================================
logger = logging.getLogger(__name__)

# ================================
# ENGINE CONFIGURATION
# ================================

def get_engine_kwargs(database_url: str) -> dict:
    """
    Retourne la configuration du moteur selon l'environnement
    """
    base_kwargs = {
        "pool_pre_ping": True,                     # Validation des connexions
        "echo": settings.LOG_SQL_QUERIES,          # Logging des requêtes SQL
        "future": True,                            # API 2.0
    }

    if database_url.startswith("sqlite"):
        base_kwargs["connect_args"] = {"check_same_thread": False}
        # une base en mémoire n'existe que sur sa connexion : on la partage
        if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
            base_kwargs["poolclass"] = StaticPool
        return base_kwargs

    if settings.ENVIRONMENT == "production":
        base_kwargs.update({
            "poolclass": QueuePool,
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_timeout": settings.DB_POOL_TIMEOUT,
            "pool_recycle": settings.DB_POOL_RECYCLE,
            "connect_args": {
                "connect_timeout": 10,
                "application_name": "agencia_api",
            }
        })
    else:
        base_kwargs.update({
            "poolclass": QueuePool,
            "pool_size": 5,
            "max_overflow": 10,
            "pool_timeout": 30,
            "pool_recycle": 1800,
        })

    return base_kwargs


DATABASE_URL = settings.database_url
engine = create_engine(DATABASE_URL, **get_engine_kwargs(DATABASE_URL))

if settings.TESTING:
    logger.info("🧪 Configuration base de données de test")
else:
    logger.info("📊 Configuration base de données principale")

# ================================
# SESSION CONFIGURATION
# ================================

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True,
    expire_on_commit=False,
)

# ================================
# METADATA & BASE
# ================================

naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}
metadata = MetaData(naming_convention=naming_convention)
Base = declarative_base(metadata=metadata)

# ================================
# DATABASE EVENTS & MONITORING
# ================================

MAX_REQUETES_LENTES = 50
MAX_ERREURS = 20

# Compteurs exposés par /health ; les files gardent les derniers événements
query_metrics: Dict[str, Any] = {
    "total_queries": 0,
    "slow_queries": deque(maxlen=MAX_REQUETES_LENTES),
    "errors": deque(maxlen=MAX_ERREURS),
}


def _sqlite_power(base: Optional[float], exponent: Optional[float]) -> Optional[float]:
    if base is None or exponent is None:
        return None
    try:
        return math.pow(base, exponent)
    except OverflowError:
        return math.inf


def _sqlite_sqrt(value: Optional[float]) -> Optional[float]:
    if value is None or value < 0:
        return None
    return math.sqrt(value)


@event.listens_for(Engine, "connect")
def set_database_pragma(dbapi_connection, connection_record):
    """Configuration par SGBD à l'ouverture de connexion."""
    # SQLite (tests) : fonctions mathématiques utilisées par les requêtes de distance
    if isinstance(dbapi_connection, sqlite3.Connection):
        dbapi_connection.create_function("POWER", 2, _sqlite_power, deterministic=True)
        dbapi_connection.create_function("SQRT", 1, _sqlite_sqrt, deterministic=True)
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@event.listens_for(Engine, "before_cursor_execute")
def receive_before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    context._agencia_inicio = time.perf_counter()
    query_metrics["total_queries"] += 1

    if settings.LOG_SQL_QUERIES:
        logger.debug(f"📊 SQL: {statement[:200]} | {parameters}")


@event.listens_for(Engine, "after_cursor_execute")
def receive_after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    """Enregistre les requêtes au-delà de SLOW_QUERY_THRESHOLD."""
    inicio = getattr(context, "_agencia_inicio", None)
    if inicio is None:
        return

    duracao = time.perf_counter() - inicio
    if duracao > settings.SLOW_QUERY_THRESHOLD:
        query_metrics["slow_queries"].append({
            "statement": statement[:300],
            "duration": round(duracao, 3),
            "timestamp": datetime.now().isoformat(),
        })
        logger.warning(f"🐢 Requête lente ({duracao:.2f}s): {statement[:120]}")


@event.listens_for(Engine, "handle_error")
def receive_handle_error(exception_context):
    erro = str(exception_context.original_exception)
    query_metrics["errors"].append({"error": erro, "timestamp": datetime.now().isoformat()})
    logger.error(f"❌ Erreur base de données: {erro}")

# ================================
# SESSION MANAGEMENT
# ================================

def get_db() -> Generator[Session, None, None]:
    """Dépendance FastAPI : session DB."""
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"❌ Erreur session DB: {e}")
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def db_transaction(isolation_level: Optional[str] = None) -> Iterator[Session]:
    """
    Context manager transactionnel : commit si tout se passe bien,
    rollback puis propagation sinon. Aucune nouvelle tentative.
    """
    db = SessionLocal()
    try:
        if isolation_level:
            db.connection(execution_options={"isolation_level": isolation_level})
        logger.debug("🔄 Début transaction")
        yield db
        db.commit()
        logger.debug("✅ Transaction committée")
    except Exception as e:
        logger.error(f"❌ Erreur transaction: {e}")
        db.rollback()
        raise
    finally:
        db.close()

# ================================
# SCHEMA MANAGEMENT
# ================================

def create_all_tables(bind: Optional[Engine] = None) -> None:
    """Crée les tables déclarées sur Base (idempotent)."""
    # enregistre les modèles sur Base.metadata
    from app.models import agencia  # noqa: F401

    try:
        Base.metadata.create_all(bind=bind or engine)
        logger.info("✅ Tables créées avec succès")
    except Exception as e:
        logger.error(f"❌ Erreur création tables: {e}", exc_info=True)
        raise


def drop_all_tables(bind: Optional[Engine] = None) -> None:
    """Supprime toutes les tables (tests uniquement)."""
    from app.models import agencia  # noqa: F401

    Base.metadata.drop_all(bind=bind or engine)
    logger.info("🗑️ Tables supprimées")

# ================================
# HEALTH CHECK & METRICS
# ================================

def health_check_db() -> Dict[str, Any]:
    """
    Vérifie la connexion avec un SELECT 1 ; ne lève jamais d'exception.
    """
    inicio = time.perf_counter()
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"❌ Health check échoué: {e}", exc_info=True)
        return {"status": "unhealthy", "error": str(e)}

    return {
        "status": "healthy",
        "dialect": engine.dialect.name,
        "response_time_ms": round((time.perf_counter() - inicio) * 1000.0, 2),
    }


def get_performance_metrics() -> Dict[str, Any]:
    return {
        "total_queries": query_metrics["total_queries"],
        "slow_queries": list(query_metrics["slow_queries"])[-5:],
        "recent_errors": list(query_metrics["errors"])[-5:],
    }

# ================================
# EXPORTS
# ================================

__all__ = [
    "engine",
    "SessionLocal",
    "Base",
    "get_db",
    "db_transaction",
    "create_all_tables",
    "drop_all_tables",
    "health_check_db",
    "get_performance_metrics",
    "query_metrics",
]
