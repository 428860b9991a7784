from __future__ import annotations

import logging
from typing import Optional

from telegram import Update
from telegram.ext import ContextTypes

from ...core.config import settings
from ...core.i18n import PresentationStrings, strings_from_settings, t
from ...infra.preferences_repo import PreferencesRepo
from ...infra.store import PreferencesStore
from .presenter import SplashPresenter

log = logging.getLogger(__name__)

SPLASH_KEY = "splash"
LANGPACK_KEY = "langpack"


async def _read_strings(repo: PreferencesRepo) -> PresentationStrings:
    return strings_from_settings(await repo.get_localization_settings())


async def current_strings(store: PreferencesStore) -> PresentationStrings:
    return await store.transaction(_read_strings)


async def close_splash(context: ContextTypes.DEFAULT_TYPE) -> None:
    presenter: Optional[SplashPresenter] = context.chat_data.pop(SPLASH_KEY, None)
    if presenter is not None:
        await presenter.teardown()


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    chat = update.effective_chat
    if not chat:
        return
    await close_splash(context)

    store = PreferencesStore(scope_id=chat.id)
    strings = await current_strings(store)
    user = update.effective_user
    client_lang = (user.language_code or "").split("-")[0] if user else ""

    presenter = SplashPresenter(
        context.bot,
        chat.id,
        store,
        context.bot_data[LANGPACK_KEY],
        strings=strings,
        client_lang_code=client_lang or None,
        extract_keys=settings.SUGGESTION_KEYS,
        baseline=settings.BASELINE_LANG,
        timeout=settings.activation_timeout,
    )

    async def next_pressed(new_strings: Optional[PresentationStrings]) -> None:
        # no new strings means the stored language was already the chosen one
        active = new_strings if new_strings is not None else await current_strings(store)
        await presenter.view.replace_with(t(active, "Intro.Next", language_code=active.language_code))
        if context.chat_data.get(SPLASH_KEY) is presenter:
            await close_splash(context)

    presenter.next_pressed = next_pressed
    context.chat_data[SPLASH_KEY] = presenter
    await presenter.appear()


async def on_splash_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    q = update.callback_query
    if not q:
        return
    presenter: Optional[SplashPresenter] = context.chat_data.get(SPLASH_KEY)
    if presenter is None or q.message is None or q.message.message_id != presenter.view.message_id:
        # stale keyboard from an earlier splash
        await q.answer()
        return
    if not presenter.view.is_enabled:
        await q.answer(t(presenter.view.strings, "Intro.PleaseWait"))
        return
    presenter.view.handle_tap(q.data or "")
    await q.answer()
