from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List

from telegram import BotCommand, Update
from telegram.ext import Application, ApplicationBuilder, CallbackQueryHandler, ContextTypes

from .core.config import settings
from .core.error_handler import setup_error_handlers
from .core.i18n import default_presentation_strings
from .core.logging_config import setup_logging, get_logger
from .features.splash import register as register_splash
from .features.splash.handlers import LANGPACK_KEY
from .infra import db
from .infra.langpack_client import LangPackClient
from .infra.migrate import migrate

log = get_logger(__name__)


async def on_startup(app: Application) -> None:
    await migrate()  # ensure DB and pragmas
    app.bot_data[LANGPACK_KEY] = LangPackClient(settings.LANGPACK_API_URL, timeout=settings.LANGPACK_API_TIMEOUT)
    await set_bot_commands(app)


async def on_shutdown(app: Application) -> None:
    client = app.bot_data.pop(LANGPACK_KEY, None)
    if client is not None:
        await client.close()
    await db.dispose_engine()


async def set_bot_commands(app: Application) -> None:
    cmds: List[BotCommand] = [
        BotCommand("start", "Show the introduction"),
    ]
    await app.bot.set_my_commands(cmds)


def make_app() -> Application:
    default_presentation_strings()  # fail early if the packaged table is missing

    app = (
        ApplicationBuilder()
        .token(settings.BOT_TOKEN)
        .concurrent_updates(True)
        .post_init(on_startup)
        .post_shutdown(on_shutdown)
        .build()
    )

    register_splash(app)

    # Catch stray callbacks so old keyboards don't raise
    async def _noop(_: Update, __: ContextTypes.DEFAULT_TYPE) -> None:
        return None
    app.add_handler(CallbackQueryHandler(_noop), group=10)

    setup_error_handlers(app)

    return app


def run() -> None:
    # Ensure data directory exists for SQLite path
    Path("data").mkdir(exist_ok=True)

    setup_logging(log_file=True, debug=settings.DEBUG)
    if not settings.BOT_TOKEN:
        log.error("BOT_TOKEN is not set")
        raise SystemExit(1)
    log.info(f"Bot starting, language pack backend at {settings.LANGPACK_API_URL}")

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    loop.run_until_complete(db.init_engine(settings.DATABASE_URL))
    db.init_sessionmaker()

    app = make_app()
    app.run_polling(allowed_updates=["message", "callback_query"], drop_pending_updates=True)


if __name__ == "__main__":
    run()
