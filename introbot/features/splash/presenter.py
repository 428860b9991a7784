from __future__ import annotations

import logging
import weakref
from typing import Awaitable, Callable, Iterable, Optional

from ...core.errors import ActivationError
from ...core.i18n import PresentationStrings, t
from ...infra.store import PreferencesStore
from ...localization.activation import ActivationResult, LocalizationActivator
from ...localization.network import LangPackNetwork
from ...localization.suggestion import BASELINE_LANGUAGE, CONTINUE_WITH_LOCALIZATION_KEY, suggested_localization
from .view import IntroView

log = logging.getLogger(__name__)

NextPressed = Callable[[Optional[PresentationStrings]], Awaitable[None]]


class SplashPresenter:
    """Owns the intro view of one chat and turns its taps into activations."""

    def __init__(
        self,
        bot,
        chat_id: int,
        store: PreferencesStore,
        network: LangPackNetwork,
        *,
        strings: Optional[PresentationStrings] = None,
        client_lang_code: Optional[str] = None,
        extract_keys: Iterable[str] = (CONTINUE_WITH_LOCALIZATION_KEY,),
        baseline: str = BASELINE_LANGUAGE,
        timeout: Optional[float] = 30.0,
    ) -> None:
        self.chat_id = chat_id
        self.baseline = baseline
        self.next_pressed: Optional[NextPressed] = None
        keys = tuple(extract_keys)

        self.view = IntroView(
            bot,
            chat_id,
            suggestions=lambda: suggested_localization(network, keys, client_lang_code, baseline),
            strings=strings,
        )

        ref = weakref.ref(self)

        async def on_finished(result: ActivationResult) -> None:
            presenter = ref()
            if presenter is None:
                return
            if presenter.next_pressed is not None:
                await presenter.next_pressed(result.strings)

        async def on_failed(error: ActivationError) -> None:
            presenter = ref()
            if presenter is None:
                return
            await presenter.view.show_notice(t(presenter.view.strings, "Intro.ActivationFailed"))

        def on_enabled_changed(enabled: bool) -> None:
            presenter = ref()
            if presenter is not None:
                presenter.view.is_enabled = enabled

        self.activator = LocalizationActivator(
            store,
            network,
            baseline=baseline,
            timeout=timeout,
            on_finished=on_finished,
            on_failed=on_failed,
            on_enabled_changed=on_enabled_changed,
        )

        def start_messaging() -> None:
            presenter = ref()
            if presenter is not None:
                presenter.activate_localization(presenter.baseline)

        def start_messaging_in_alternative_language(code: Optional[str]) -> None:
            presenter = ref()
            if presenter is not None and code:
                presenter.activate_localization(code)

        self.view.start_messaging = start_messaging
        self.view.start_messaging_in_alternative_language = start_messaging_in_alternative_language

    def activate_localization(self, code: str) -> None:
        log.info("Chat %s picked language %s", self.chat_id, code)
        self.view.notice = None
        self.activator.start(code)

    async def appear(self) -> None:
        await self.view.view_will_appear()
        await self.view.view_did_appear()

    async def disappear(self) -> None:
        await self.view.view_will_disappear()
        await self.view.view_did_disappear()

    async def teardown(self) -> None:
        self.activator.cancel()
        await self.disappear()
