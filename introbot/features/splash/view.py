from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Callable, Optional

from telegram import InlineKeyboardButton, InlineKeyboardMarkup
from telegram.constants import ParseMode
from telegram.error import BadRequest, TelegramError

from ...core.i18n import PresentationStrings, t
from ...core.tasks import TaskSlot
from ...localization.models import SuggestedLocalization

log = logging.getLogger(__name__)

CB_START = "splash:start"
CB_ALT_PREFIX = "splash:alt:"

SuggestionSource = Callable[[], AsyncIterator[SuggestedLocalization]]


class IntroView:
    """The introduction screen, shown as one message with an inline keyboard.

    It offers "Start Messaging" in the baseline language and, once the
    suggestion source yields something, a "Continue in X" button for the
    suggested language. Taps are reported through ``start_messaging`` and
    ``start_messaging_in_alternative_language``.
    """

    def __init__(
        self,
        bot,
        chat_id: int,
        suggestions: SuggestionSource,
        strings: Optional[PresentationStrings] = None,
    ) -> None:
        self.bot = bot
        self.chat_id = chat_id
        self.strings = strings
        self.message_id: Optional[int] = None
        self.suggestion: Optional[SuggestedLocalization] = None
        self.notice: Optional[str] = None
        self.is_enabled = True
        self.start_messaging: Optional[Callable[[], None]] = None
        self.start_messaging_in_alternative_language: Optional[Callable[[Optional[str]], None]] = None
        self._suggestions = suggestions
        self._subscription = TaskSlot("suggestion")

    @property
    def is_loaded(self) -> bool:
        return self.message_id is not None

    def text(self) -> str:
        parts = [f"<b>{t(self.strings, 'Intro.Title')}</b>", t(self.strings, "Intro.Text")]
        if self.notice:
            parts.append(f"<i>{self.notice}</i>")
        return "\n\n".join(parts)

    def keyboard(self) -> InlineKeyboardMarkup:
        rows = [[InlineKeyboardButton(t(self.strings, "Intro.StartMessaging"), callback_data=CB_START)]]
        if self.suggestion is not None:
            label = self.suggestion.continue_with_language_string
            rows.append([InlineKeyboardButton(label, callback_data=CB_ALT_PREFIX + self.suggestion.language_code)])
        return InlineKeyboardMarkup(rows)

    async def view_will_appear(self) -> None:
        if self.is_loaded:
            return
        msg = await self.bot.send_message(
            self.chat_id, self.text(), reply_markup=self.keyboard(), parse_mode=ParseMode.HTML
        )
        self.message_id = msg.message_id

    async def view_did_appear(self) -> None:
        if self._subscription.task is None and self.suggestion is None:
            self._subscription.set(asyncio.create_task(self._consume(), name=f"suggestion:{self.chat_id}"))

    async def view_will_disappear(self) -> None:
        log.debug("Intro view in chat %s about to disappear", self.chat_id)

    async def view_did_disappear(self) -> None:
        self._subscription.cancel()

    async def _consume(self) -> None:
        async for suggestion in self._suggestions():
            self.suggestion = suggestion
            try:
                await self.refresh()
            except TelegramError as e:
                log.warning("Could not show suggestion in chat %s: %s", self.chat_id, e)

    async def refresh(self) -> None:
        if not self.is_loaded:
            return
        try:
            await self.bot.edit_message_text(
                self.text(),
                chat_id=self.chat_id,
                message_id=self.message_id,
                reply_markup=self.keyboard(),
                parse_mode=ParseMode.HTML,
            )
        except BadRequest as e:
            if "Message is not modified" not in str(e):
                raise

    async def show_notice(self, notice: Optional[str]) -> None:
        self.notice = notice
        await self.refresh()

    async def replace_with(self, text: str) -> None:
        """Swap the intro for the next screen's text and drop the keyboard."""
        if not self.is_loaded:
            await self.bot.send_message(self.chat_id, text, parse_mode=ParseMode.HTML)
            return
        await self.bot.edit_message_text(
            text, chat_id=self.chat_id, message_id=self.message_id, parse_mode=ParseMode.HTML
        )

    def handle_tap(self, data: str) -> bool:
        if not self.is_enabled:
            return False
        if data == CB_START:
            if self.start_messaging is not None:
                self.start_messaging()
            return True
        if data.startswith(CB_ALT_PREFIX):
            code = data[len(CB_ALT_PREFIX):] or None
            if self.start_messaging_in_alternative_language is not None:
                self.start_messaging_in_alternative_language(code)
            return True
        return False
