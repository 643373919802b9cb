# paylink/bot.py
import logging
from telegram.ext import (
    Application,
    CommandHandler,
    MessageHandler,
    CallbackQueryHandler,
    ConversationHandler,
    filters
)
from .config import Config
from .constants import (
    CANCEL_PROOF_CALLBACK,
    CONFIRM_CALLBACK_PREFIX,
    WAITING_BUYER_EMAIL,
    WAITING_BUYER_NAME,
    WAITING_PROOF_URL,
)
from .handlers import AdminHandler, BaseHandler, UserHandler

class PaylinkBot:
    def __init__(self, services, token: str = None):
        """Build the application and register handlers"""
        self.application = Application.builder().token(token or Config.TELEGRAM_TOKEN).build()
        self.admin = AdminHandler(services)
        self.user = UserHandler(services)
        self.logger = logging.getLogger(__name__)
        self.setup_handlers()

    def proof_conversation(self) -> ConversationHandler:
        text_only = filters.TEXT & ~filters.COMMAND
        return ConversationHandler(
            entry_points=[CommandHandler("proof", self.user.proof_start)],
            states={
                WAITING_BUYER_NAME: [MessageHandler(text_only, self.user.proof_name)],
                WAITING_BUYER_EMAIL: [MessageHandler(text_only, self.user.proof_email)],
                WAITING_PROOF_URL: [MessageHandler(text_only, self.user.proof_url)],
            },
            fallbacks=[
                CommandHandler("cancel", BaseHandler.cancel_conversation),
                CallbackQueryHandler(
                    BaseHandler.cancel_conversation,
                    pattern=f"^{CANCEL_PROOF_CALLBACK}$"
                ),
            ]
        )

    def setup_handlers(self):
        """Register command handlers"""
        app = self.application

        # buyer
        app.add_handler(CommandHandler("start", self.user.start))
        app.add_handler(CommandHandler("pay", self.user.pay))
        app.add_handler(CommandHandler("download", self.user.download))
        app.add_handler(self.proof_conversation())

        # catalog
        app.add_handler(CommandHandler("products", self.admin.list_products))
        app.add_handler(CommandHandler("newproduct", self.admin.new_product))
        app.add_handler(CommandHandler("setactive", self.admin.set_active))
        app.add_handler(CommandHandler("setprice", self.admin.set_price))
        app.add_handler(CommandHandler("setfile", self.admin.set_file))
        app.add_handler(CommandHandler("clearfile", self.admin.clear_file))
        app.add_handler(CommandHandler("deleteproduct", self.admin.delete_product))

        # payment links
        app.add_handler(CommandHandler("newlink", self.admin.new_link))
        app.add_handler(CommandHandler("pending", self.admin.pending_payments))
        app.add_handler(CommandHandler("confirm", self.admin.confirm_payment))
        app.add_handler(CallbackQueryHandler(
            self.admin.confirm_payment,
            pattern=f"^{CONFIRM_CALLBACK_PREFIX}\\d+$"
        ))
        app.add_handler(CommandHandler("stats", self.admin.dashboard))
        app.add_handler(CommandHandler("expire", self.admin.expire_links))

    async def start(self):
        await self.application.initialize()
        await self.application.start()
        await self.application.updater.start_polling()
        self.logger.info("Bot polling started")

    async def stop(self):
        if self.application.updater and self.application.updater.running:
            await self.application.updater.stop()
        if self.application.running:
            await self.application.stop()
        await self.application.shutdown()
        self.logger.info("Bot stopped")
