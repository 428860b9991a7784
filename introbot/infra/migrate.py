from __future__ import annotations

import logging

from . import db
from .models import Base

log = logging.getLogger(__name__)


async def migrate() -> None:
    async with db.require_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await db.set_sqlite_pragmas()
    log.info("Database schema ready")
