"""Bot-wide error handling with owner notifications."""

from __future__ import annotations

import asyncio
import html
import json
import logging
import traceback
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from telegram import Update
from telegram.error import RetryAfter, TelegramError, TimedOut
from telegram.ext import Application, ContextTypes

from .config import settings
from .errors import LangPackError
from .i18n import strings_from_settings, t
from ..infra.store import PreferencesStore

log = logging.getLogger(__name__)

# Error texts that are not worth reporting to owners
IGNORE_ERRORS = (
    "Message is not modified",
    "Message to edit not found",
    "Query is too old",
    "query id is invalid",
    "Chat not found",
)


T = TypeVar("T")


class ErrorHandler:
    """Centralized error handling with owner notifications."""

    @staticmethod
    async def handle_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        try:
            log.error("Exception while handling an update:", exc_info=context.error)

            error = context.error
            if not error:
                return

            error_message = str(error)
            if any(ignore in error_message for ignore in IGNORE_ERRORS):
                log.debug(f"Ignoring known error: {error_message}")
                return

            tb_string = "".join(traceback.format_exception(None, error, error.__traceback__))
            update_str = ""
            if isinstance(update, Update):
                update_str = json.dumps(update.to_dict(), indent=2, ensure_ascii=False)

            error_text = ErrorHandler.format_error_message(error, tb_string, update_str, update)
            await ErrorHandler._notify_owners(context, error_text)

            if isinstance(update, Update) and update.effective_message:
                text = await ErrorHandler._generic_error_text(update)
                await ErrorHandler.send_with_retry(
                    update.effective_message.reply_text,
                    text,
                    retry_label="reply_text",
                )
        except Exception as e:
            log.error(f"Error in error handler: {e}")

    @staticmethod
    async def _generic_error_text(update: Update) -> str:
        if not update.effective_chat:
            return t(None, "errors.generic")
        store = PreferencesStore(scope_id=update.effective_chat.id)
        try:
            async def _read(repo):
                return strings_from_settings(await repo.get_localization_settings())

            strings = await store.transaction(_read)
        except (SQLAlchemyError, LangPackError, RuntimeError) as e:
            log.warning("Could not load strings for error reply: %s", e)
            strings = None
        return t(strings, "errors.generic")

    @staticmethod
    def format_error_message(error: BaseException, tb_string: str, update_str: str, update: object) -> str:
        user_info = ""
        chat_info = ""

        if isinstance(update, Update):
            if update.effective_user:
                user = update.effective_user
                user_info = f"User: {user.mention_html()} (ID: {user.id})"
            if update.effective_chat:
                chat = update.effective_chat
                chat_title = html.escape(chat.title or "Private")
                chat_info = f"Chat: {chat_title} ({chat.type}, ID: {chat.id})"

        if len(tb_string) > 2000:
            tb_string = tb_string[-2000:]

        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")

        message_parts = [
            "<b>🚨 Bot Error Report</b>",
            f"<b>Time:</b> {timestamp}",
            f"<b>Error:</b> <code>{html.escape(str(error))}</code>",
        ]
        if user_info:
            message_parts.append(user_info)
        if chat_info:
            message_parts.append(chat_info)

        message_parts.extend([
            "",
            "<b>Traceback:</b>",
            f"<pre>{html.escape(tb_string)}</pre>",
        ])

        if update_str and len(update_str) < 500:
            message_parts.extend([
                "",
                "<b>Update data:</b>",
                f"<pre>{html.escape(update_str)}</pre>",
            ])

        return "\n".join(message_parts)

    @staticmethod
    async def _notify_owners(context: ContextTypes.DEFAULT_TYPE, error_text: str) -> None:
        for owner_id in settings.OWNER_IDS:
            await ErrorHandler.send_with_retry(
                context.bot.send_message,
                chat_id=owner_id,
                text=error_text[:4000],
                parse_mode="HTML",
                retry_label=f"notify_owner_{owner_id}",
            )

    @staticmethod
    async def send_with_retry(
        func: Callable[..., Awaitable[T]],
        *args: Any,
        retry_label: str = "send_message",
        max_attempts: int = 3,
        **kwargs: Any,
    ) -> T | None:
        """Best-effort wrapper around Telegram API calls with backoff."""
        attempt = 0
        while attempt < max_attempts:
            try:
                return await func(*args, **kwargs)
            except RetryAfter as exc:
                attempt += 1
                retry_after = exc.retry_after
                seconds = retry_after.total_seconds() if hasattr(retry_after, "total_seconds") else retry_after
                wait_time = int(seconds) + 1
                log.warning(
                    "Flood control on %s, retrying in %ss (attempt %s/%s)",
                    retry_label,
                    wait_time,
                    attempt,
                    max_attempts,
                )
                await asyncio.sleep(wait_time)
            except TimedOut:
                attempt += 1
                wait_time = 2 ** attempt
                log.warning(
                    "Timeout on %s, retrying in %ss (attempt %s/%s)",
                    retry_label,
                    wait_time,
                    attempt,
                    max_attempts,
                )
                await asyncio.sleep(wait_time)
            except TelegramError as exc:
                log.error("Telegram error on %s: %s", retry_label, exc)
                break
        return None


def setup_error_handlers(application: Application) -> None:
    application.add_error_handler(ErrorHandler.handle_error)
    log.info("Error handlers configured")
