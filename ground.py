from __future__ import annotations

import asyncio
import logging
import os
from collections import OrderedDict

from telegram import Update
from telegram.ext import Application, ContextTypes, MessageHandler, filters

import service

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Last reply per chat, so one conversation never suppresses another's repeat.
# Least recently active chats are forgotten beyond MAX_TRACKED_CHATS.
MAX_TRACKED_CHATS = 10000
LAST_REPLIES: "OrderedDict[int, str]" = OrderedDict()


def remember_reply(chat_id: int, reply: str) -> None:
    LAST_REPLIES[chat_id] = reply
    LAST_REPLIES.move_to_end(chat_id)
    while len(LAST_REPLIES) > MAX_TRACKED_CHATS:
        LAST_REPLIES.popitem(last=False)


async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle incoming messages by replying via ``service.answer``."""
    try:
        text = update.message.text or ""
        chat_id = update.effective_chat.id
        response = await asyncio.to_thread(
            service.answer, text, LAST_REPLIES.get(chat_id, "")
        )
        await update.message.reply_text(response)
        remember_reply(chat_id, response)
    except Exception:  # pragma: no cover
        logger.exception("error handling message")


def main() -> None:
    """Run the Telegram bot."""
    token = os.environ.get("TELEGRAM_TOKEN")
    if not token:
        raise RuntimeError("TELEGRAM_TOKEN not set")

    service.get_service()

    application = Application.builder().token(token).build()
    application.add_handler(
        MessageHandler(filters.TEXT & ~filters.COMMAND, handle_message)
    )
    logger.info("polling for messages")
    application.run_polling()


if __name__ == "__main__":  # pragma: no cover - manual run
    main()
