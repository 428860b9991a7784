from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from . import db
from .models import GLOBAL_SCOPE
from .preferences_repo import PreferencesRepo

log = logging.getLogger(__name__)

T = TypeVar("T")


class PreferencesStore:
    """Transactional access to the preferences of one scope.

    ``transaction(fn)`` runs ``fn(repo)`` inside a single database transaction:
    committed when ``fn`` returns, rolled back when it raises, and the session
    is closed on every path. Transactions of one store never interleave.
    """

    def __init__(
        self,
        sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None,
        scope_id: int = GLOBAL_SCOPE,
    ) -> None:
        self._sessionmaker = sessionmaker
        self.scope_id = scope_id
        self._lock = asyncio.Lock()

    def _maker(self) -> async_sessionmaker[AsyncSession]:
        maker = self._sessionmaker or db.SessionLocal
        if maker is None:
            raise RuntimeError("Sessionmaker not initialized")
        return maker

    async def transaction(self, fn: Callable[[PreferencesRepo], Awaitable[T]]) -> T:
        async with self._lock:
            async with self._maker()() as session:
                async with session.begin():
                    return await fn(PreferencesRepo(session, self.scope_id))
