"""
Connexion a la base de donnees / Database connection.
Supporte SQLite (dev) et PostgreSQL (prod) via SQLAlchemy 2.0 async.
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from bulkdispo.config import settings

logger = logging.getLogger(__name__)

_is_sqlite = settings.DATABASE_URL.startswith("sqlite")

# Configuration moteur / Engine configuration
_engine_kwargs: dict = {
    "echo": settings.DEBUG,
}

# PostgreSQL : connection pooling
if not _is_sqlite:
    _engine_kwargs.update({
        "pool_size": 10,
        "max_overflow": 20,
        "pool_timeout": 30,
        "pool_recycle": 1800,
        "pool_pre_ping": True,
    })

engine = create_async_engine(settings.DATABASE_URL, **_engine_kwargs)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncSession:
    """Dependance FastAPI pour obtenir une session DB / FastAPI dependency for DB session."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db(bind=None):
    """Creer les tables au demarrage / Create tables on startup."""
    # Enregistrer les modèles sur Base.metadata / Register models on Base.metadata
    import bulkdispo.models  # noqa: F401

    target = bind or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    # Ajouter les colonnes manquantes sur tables existantes /
    # Add missing columns on existing tables
    await _migrate_missing_columns(target)


async def _migrate_missing_columns(target):
    """Verifier et ajouter les colonnes manquantes / Check and add missing columns via ALTER TABLE.

    Supporte SQLite (PRAGMA) et PostgreSQL (information_schema).
    """
    is_sqlite = target.dialect.name == "sqlite"
    async with target.begin() as conn:
        for table in Base.metadata.sorted_tables:
            if is_sqlite:
                result = await conn.execute(text(f"PRAGMA table_info('{table.name}')"))
                existing_cols = {row[1] for row in result.fetchall()}
            else:
                result = await conn.execute(text(
                    "SELECT column_name FROM information_schema.columns "
                    "WHERE table_name = :table_name AND table_schema = 'public'"
                ), {"table_name": table.name})
                existing_cols = {row[0] for row in result.fetchall()}

            for col in table.columns:
                if col.name in existing_cols:
                    continue
                col_type = col.type.compile(dialect=target.dialect)
                col_type_str = str(col_type)
                # Colonnes tonnage et texte : défaut neutre / Tonnage and text columns: neutral default
                if col_type_str.startswith("NUMERIC") or col_type_str in ("INTEGER", "BIGINT"):
                    default = "DEFAULT 0"
                elif col_type_str.startswith("VARCHAR") or col_type_str == "TEXT":
                    default = "DEFAULT ''"
                else:
                    default = ""
                await conn.execute(text(
                    f'ALTER TABLE "{table.name}" ADD COLUMN "{col.name}" {col_type} {default}'
                ))
                logger.info("Added column %s.%s (%s)", table.name, col.name, col_type)
