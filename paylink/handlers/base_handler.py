# paylink/handlers/base_handler.py
import functools
import logging
from pydantic import ValidationError
from telegram import Update
from telegram.ext import ContextTypes, ConversationHandler
from ..config import Config
from ..exceptions import PaylinkError
from ..utils.keyboards import Keyboards
from ..utils.messages import Messages

logger = logging.getLogger(__name__)


class UsageError(Exception):
    """Command arguments could not be parsed"""


def validation_summary(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in item['loc']) or 'input'}: {item['msg']}"
        for item in error.errors()
    )


def reply_on_error(func):
    """Turn expected failures into a reply instead of a crashed update"""
    @functools.wraps(func)
    async def wrapper(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        try:
            return await func(self, update, context)
        except UsageError as e:
            await self.reply(update, f"ℹ️ Usage: {e}")
        except ValidationError as e:
            await self.reply(update, f"❌ Invalid input: {validation_summary(e)}")
        except PaylinkError as e:
            await self.reply(update, f"❌ {e}")
        except Exception as e:
            logger.error(f"Error handling update in {func.__name__}: {e}", exc_info=True)
            await self.reply(update, "❌ Something went wrong. Please try again.")
            raise
    return wrapper


def admin_only(func):
    @functools.wraps(func)
    async def wrapper(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        if not await self.is_admin(update.effective_user.id):
            await self.reply(update, "⛔️ You do not have access to this section.")
            return None
        return await func(self, update, context)
    return wrapper


class BaseHandler:
    """Base class for the bot handlers"""
    def __init__(self, services):
        self.services = services
        self.keyboards = Keyboards()
        self.messages = Messages()

    @staticmethod
    async def reply(update: Update, text: str, reply_markup=None):
        if update.callback_query:
            await update.callback_query.answer()
            await update.callback_query.edit_message_text(text, reply_markup=reply_markup)
        else:
            await update.effective_message.reply_text(text, reply_markup=reply_markup)

    @staticmethod
    async def cancel_conversation(update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Abort the current conversation"""
        context.user_data.pop('proof', None)
        await BaseHandler.reply(update, "❌ Operation cancelled.")
        return ConversationHandler.END

    async def is_admin(self, user_id: int) -> bool:
        return user_id in Config.ADMIN_IDS
