"""Switching the display language of one scope.

An activation reads the stored language, and when the requested one differs,
downloads and stores the new pack and rebuilds the string table from what was
stored. Only one activation runs per activator: starting another cancels the
one in flight, and only the newest one ever reports back.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

import httpx
from sqlalchemy.exc import SQLAlchemyError

from ..core.errors import (
    ActivationError,
    ActivationNetworkError,
    ActivationStorageError,
    ActivationSuperseded,
    ActivationTimeout,
    LangPackError,
)
from ..core.i18n import PresentationStrings, strings_from_settings
from ..core.tasks import TaskSlot
from ..infra.preferences_repo import PreferencesRepo
from ..infra.store import PreferencesStore
from .apply import download_and_apply_localization
from .network import LangPackNetwork
from .suggestion import BASELINE_LANGUAGE

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActivationResult:
    language_code: str
    strings: Optional[PresentationStrings] = None

    @property
    def changed(self) -> bool:
        return self.strings is not None


MaybeAwaitable = Union[Awaitable[None], None]
FinishedCallback = Callable[[ActivationResult], MaybeAwaitable]
FailedCallback = Callable[[ActivationError], MaybeAwaitable]
EnabledCallback = Callable[[bool], None]

# a stored settings row that cannot be read or decoded
SETTINGS_READ_ERRORS = (SQLAlchemyError, LangPackError, KeyError, TypeError, ValueError)


async def _deliver(callback: Optional[Callable[[Any], MaybeAwaitable]], value: Any) -> None:
    if callback is None:
        return
    res = callback(value)
    if inspect.isawaitable(res):
        await res


class LocalizationActivator:
    def __init__(
        self,
        store: PreferencesStore,
        network: LangPackNetwork,
        *,
        baseline: str = BASELINE_LANGUAGE,
        timeout: Optional[float] = 30.0,
        on_finished: Optional[FinishedCallback] = None,
        on_failed: Optional[FailedCallback] = None,
        on_enabled_changed: Optional[EnabledCallback] = None,
    ) -> None:
        self.store = store
        self.network = network
        self.baseline = baseline
        self.timeout = timeout
        self.on_finished = on_finished
        self.on_failed = on_failed
        self.on_enabled_changed = on_enabled_changed
        self._slot = TaskSlot("activation")
        self._enabled = True

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def in_flight(self) -> bool:
        return self._slot.busy

    def _set_enabled(self, value: bool) -> None:
        if self._enabled == value:
            return
        self._enabled = value
        if self.on_enabled_changed is not None:
            self.on_enabled_changed(value)

    async def current_language_code(self) -> str:
        async def _read(repo: PreferencesRepo) -> str:
            current = await repo.get_localization_settings()
            return current.language_code if current is not None else self.baseline

        return await self.store.transaction(_read)

    def start(self, language_code: str) -> asyncio.Task:
        """Begin activating ``language_code``, replacing any activation in flight."""
        task = asyncio.create_task(self._run(language_code), name=f"activate:{language_code}")
        task.add_done_callback(_consume_exception)
        self._slot.set(task)
        return task

    async def activate(self, language_code: str) -> ActivationResult:
        task = self.start(language_code)
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            if self._slot.is_current(task):
                self.cancel()
            raise
        if task.cancelled():
            raise ActivationSuperseded(language_code)
        return task.result()

    def cancel(self) -> None:
        self._slot.cancel()
        self._set_enabled(True)

    async def _run(self, language_code: str) -> ActivationResult:
        try:
            result = await self._activate(language_code)
        except asyncio.CancelledError:
            log.debug("Activation of %s cancelled", language_code)
            raise
        except ActivationError as e:
            if self._release():
                log.warning("%s", e)
                await _deliver(self.on_failed, e)
            raise
        except Exception as e:
            error = ActivationError(language_code, f"activation of '{language_code}' failed: {e!r}")
            if self._release():
                log.exception("Activation of %s failed unexpectedly", language_code)
                await _deliver(self.on_failed, error)
            raise error from e
        if self._release():
            await _deliver(self.on_finished, result)
        return result

    def _release(self) -> bool:
        """Take the running activation out of the slot and re-enable.

        Returns False when a newer activation owns the slot. Once released, the
        task is delivering and a new request can no longer cancel it.
        """
        if not self._slot.is_current():
            return False
        self._slot.set(None)
        self._set_enabled(True)
        return True

    async def _activate(self, language_code: str) -> ActivationResult:
        try:
            current = await self.current_language_code()
        except SETTINGS_READ_ERRORS as e:
            raise ActivationStorageError(language_code, f"reading current language failed: {e!r}") from e

        if current == language_code:
            log.info("Localization %s already active in scope %s", language_code, self.store.scope_id)
            return ActivationResult(language_code)

        self._set_enabled(False)
        log.info("Activating localization %s (was %s) in scope %s", language_code, current, self.store.scope_id)
        try:
            await asyncio.wait_for(
                download_and_apply_localization(self.store, self.network, language_code),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise ActivationTimeout(language_code, self.timeout) from e
        except (httpx.HTTPError, LangPackError) as e:
            raise ActivationNetworkError(language_code, f"downloading '{language_code}' failed: {e}") from e
        except SQLAlchemyError as e:
            raise ActivationStorageError(language_code, f"storing '{language_code}' failed: {e}") from e

        try:
            strings = await self.store.transaction(_read_strings)
        except SETTINGS_READ_ERRORS as e:
            raise ActivationStorageError(language_code, f"reading '{language_code}' back failed: {e!r}") from e

        return ActivationResult(language_code, strings)


async def _read_strings(repo: PreferencesRepo) -> PresentationStrings:
    return strings_from_settings(await repo.get_localization_settings())


def _consume_exception(task: asyncio.Task) -> None:
    # activation failures reach callers through on_failed or activate()
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None and not isinstance(exc, ActivationError):
        log.error("Activation task %s crashed", task.get_name(), exc_info=exc)
