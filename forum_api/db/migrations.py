"""
Alembic helpers for the forum schema
"""
from pathlib import Path
from typing import Optional
from alembic.config import Config
from alembic.script import ScriptDirectory
from alembic import command
from sqlalchemy.ext.asyncio import create_async_engine
import logging

from forum_api.config import settings

logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).parent.parent.parent / "alembic.ini"

def get_alembic_config(db_url: Optional[str] = None) -> Config:
    """Alembic configuration, optionally pinned to ``db_url``"""
    config = Config(str(ALEMBIC_INI))
    config.set_main_option("script_location", str(ALEMBIC_INI.parent / "alembic"))

    if db_url:
        config.set_main_option("sqlalchemy.url", db_url)
        config.attributes["url_overridden"] = True

    return config

def run_migrations(db_url: Optional[str] = None, revision: str = "head") -> None:
    command.upgrade(get_alembic_config(db_url), revision)
    logger.info(f"Database migrated to {revision}")

def downgrade_migration(revision: str, db_url: Optional[str] = None) -> None:
    command.downgrade(get_alembic_config(db_url), revision)
    logger.info(f"Downgraded to revision: {revision}")

def create_migration(message: str, autogenerate: bool = True) -> None:
    command.revision(get_alembic_config(), message=message, autogenerate=autogenerate)
    logger.info(f"Created migration: {message}")

def head_revision() -> Optional[str]:
    script = ScriptDirectory.from_config(get_alembic_config())
    return script.get_current_head()

async def current_revision(db_url: Optional[str] = None) -> Optional[str]:
    """Revision recorded in the database, None when never migrated"""
    from alembic.runtime.migration import MigrationContext

    engine = create_async_engine(db_url or settings.database_url)
    try:
        async with engine.connect() as conn:
            return await conn.run_sync(
                lambda sync_conn: MigrationContext.configure(sync_conn).get_current_revision()
            )
    finally:
        await engine.dispose()

async def check_migration_status(db_url: Optional[str] = None) -> bool:
    """True when the database is at the head revision"""
    current = await current_revision(db_url)
    head = head_revision()
    if current != head:
        logger.warning(f"Database at revision {current}, head is {head}")
    return current == head
