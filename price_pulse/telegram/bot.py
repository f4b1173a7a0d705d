"""
python-telegram-bot wiring.

Translates updates into inbound events, routes them, and renders the
resulting Reply as messages, menu edits or callback answers.
"""
import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from telegram import Bot, InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.error import BadRequest
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
)

from .events import ChatKind
from .handlers import KeyboardButton, Reply
from .router import COMMAND_EVENTS, CONFIRM_DATA, CallbackParser, CommandParser, EventRouter

logger = logging.getLogger(__name__)

LifecycleHook = Callable[[], Awaitable[None]]


def render_keyboard(buttons: Sequence[KeyboardButton], columns: int = 2) -> InlineKeyboardMarkup:
    """Pair buttons marked ⭕ (subscribed) or ❌, followed by Confirm."""
    flat: List[InlineKeyboardButton] = [
        InlineKeyboardButton(
            f"⭕ {button.pair_id}" if button.active else f"❌ {button.pair_id}",
            callback_data=CallbackParser.toggle_data(button.pair_id),
        )
        for button in buttons
    ]
    flat.append(InlineKeyboardButton("Confirm", callback_data=CONFIRM_DATA))
    rows = [flat[i:i + columns] for i in range(0, len(flat), columns)]
    return InlineKeyboardMarkup(rows)


class TelegramTransport:
    """Long-polling Telegram front end for the event router."""

    def __init__(
        self,
        token: str,
        router: EventRouter,
        on_startup: Optional[LifecycleHook] = None,
        on_shutdown: Optional[LifecycleHook] = None,
    ):
        """
        Initialize the transport.

        Args:
            token: Telegram bot token
            router: Routes inbound events to handlers
            on_startup: Awaited once the application is initialized
            on_shutdown: Awaited when the application shuts down
        """
        self.router = router
        self.on_startup = on_startup
        self.on_shutdown = on_shutdown

        self.application: Application = (
            ApplicationBuilder()
            .token(token)
            .post_init(self._post_init)
            .post_shutdown(self._post_shutdown)
            .build()
        )
        for command in COMMAND_EVENTS:
            self.application.add_handler(CommandHandler(command, self.on_command))
        self.application.add_handler(CallbackQueryHandler(self.on_callback))

    @property
    def bot(self) -> Bot:
        return self.application.bot

    def run(self):
        """Poll for updates until interrupted."""
        logger.info("Starting Telegram long polling")
        self.application.run_polling(allowed_updates=Update.ALL_TYPES)

    async def on_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        message = update.effective_message
        chat = update.effective_chat
        if message is None or chat is None:
            return

        parsed = CommandParser.parse(message.text or "")
        if parsed is None:
            return
        event = CommandParser.to_event(parsed, chat.id, ChatKind.from_telegram(chat.type))
        if event is None:
            return

        reply = await self.router.route(event)
        markup = render_keyboard(reply.keyboard) if reply.keyboard else None
        await message.reply_text(reply.text, reply_markup=markup)

    async def on_callback(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        query = update.callback_query
        if query is None:
            return
        chat = update.effective_chat
        # Inline-mode messages carry no chat; still answer to stop the client spinner
        if chat is None:
            await query.answer()
            return

        event = CallbackParser.parse(query.data or "", chat.id, ChatKind.from_telegram(chat.type))
        if event is None:
            await query.answer()
            return

        reply = await self.router.route(event)
        await self.render_callback_reply(query, reply, context.bot, chat.id)

    async def render_callback_reply(self, query, reply: Reply, bot: Bot, chat_id):
        if reply.alert:
            await query.answer(reply.text)
            return

        await query.answer()
        if reply.edit_menu:
            markup = render_keyboard(reply.keyboard) if reply.keyboard else None
            try:
                await query.edit_message_text(reply.text, reply_markup=markup)
            except BadRequest as e:
                # Telegram rejects edits that change nothing
                logger.debug(f"Menu edit skipped: {e}")
            return

        if reply.close_menu:
            try:
                await query.delete_message()
            except BadRequest as e:
                logger.debug(f"Menu delete skipped: {e}")
        await bot.send_message(chat_id=chat_id, text=reply.text)

    async def _post_init(self, application: Application):
        if self.on_startup:
            await self.on_startup()

    async def _post_shutdown(self, application: Application):
        if self.on_shutdown:
            await self.on_shutdown()
