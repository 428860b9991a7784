from __future__ import annotations

from telegram.ext import Application, CallbackQueryHandler, CommandHandler, filters

from .handlers import on_splash_callback, start


def register(app: Application) -> None:
    app.add_handler(CommandHandler("start", start, filters=filters.ChatType.PRIVATE))
    app.add_handler(CallbackQueryHandler(on_splash_callback, pattern=r"^splash:"))
