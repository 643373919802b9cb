# paylink/handlers/admin_handlers.py
import logging
from telegram import Update
from telegram.ext import ContextTypes
from .base_handler import BaseHandler, UsageError, admin_only, reply_on_error
from ..constants import CONFIRM_CALLBACK_PREFIX
from ..exceptions import PaylinkError

logger = logging.getLogger(__name__)


def _int_arg(args, index: int, usage: str) -> int:
    try:
        return int(args[index])
    except (IndexError, ValueError):
        raise UsageError(usage)


class AdminHandler(BaseHandler):
    """Admin commands for the catalog and payment review"""

    @reply_on_error
    @admin_only
    async def list_products(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/products"""
        products = await self.services.products.get_products()
        if not products:
            await self.reply(update, "No products yet. Add one with /newproduct.")
            return
        await self.reply(update, "\n".join(self.messages.format_product(p) for p in products))

    @reply_on_error
    @admin_only
    async def new_product(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/newproduct name | price | file_url | file_name | description"""
        usage = "/newproduct name | price | file_url | file_name | description"
        raw = " ".join(context.args or [])
        parts = [part.strip() for part in raw.split("|")]
        if len(parts) < 2:
            raise UsageError(usage)

        fields = ['name', 'price', 'file_url', 'file_name', 'description']
        product_data = {
            field: value or None
            for field, value in zip(fields, parts)
        }
        product = await self.services.products.create_product(**product_data)
        await self.reply(update, "✅ Product created.\n\n" + self.messages.format_product(product))

    @reply_on_error
    @admin_only
    async def set_active(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/setactive <id> on|off"""
        usage = "/setactive <product_id> on|off"
        args = context.args or []
        product_id = _int_arg(args, 0, usage)
        if len(args) < 2 or args[1].lower() not in ("on", "off"):
            raise UsageError(usage)

        product = await self.services.products.update_product(
            product_id, is_active=args[1].lower() == "on"
        )
        await self.reply(update, "✅ Product updated.\n\n" + self.messages.format_product(product))

    @reply_on_error
    @admin_only
    async def set_price(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/setprice <id> <price>"""
        usage = "/setprice <product_id> <price>"
        args = context.args or []
        product_id = _int_arg(args, 0, usage)
        if len(args) < 2:
            raise UsageError(usage)

        product = await self.services.products.update_product(product_id, price=args[1])
        await self.reply(update, "✅ Product updated.\n\n" + self.messages.format_product(product))

    @reply_on_error
    @admin_only
    async def set_file(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/setfile <id> <file_url> <file_name>"""
        usage = "/setfile <product_id> <file_url> <file_name>"
        args = context.args or []
        product_id = _int_arg(args, 0, usage)
        if len(args) < 3:
            raise UsageError(usage)

        product = await self.services.products.update_product(
            product_id, file_url=args[1], file_name=" ".join(args[2:])
        )
        await self.reply(update, "✅ Product updated.\n\n" + self.messages.format_product(product))

    @reply_on_error
    @admin_only
    async def clear_file(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/clearfile <id>"""
        product_id = _int_arg(context.args or [], 0, "/clearfile <product_id>")
        product = await self.services.products.update_product(
            product_id, file_url=None, file_name=None
        )
        await self.reply(update, "✅ File removed.\n\n" + self.messages.format_product(product))

    @reply_on_error
    @admin_only
    async def delete_product(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/deleteproduct <id>"""
        product_id = _int_arg(context.args or [], 0, "/deleteproduct <product_id>")
        if await self.services.products.delete_product(product_id):
            await self.reply(update, f"🗑 Product #{product_id} deleted.")
        else:
            await self.reply(
                update,
                f"❌ Product #{product_id} was not deleted. It does not exist "
                "or still has payment links that are not expired."
            )

    @reply_on_error
    @admin_only
    async def new_link(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/newlink <product_id> [hours] [buyer_email]"""
        usage = "/newlink <product_id> [hours] [buyer_email]"
        args = context.args or []
        product_id = _int_arg(args, 0, usage)

        options = {}
        if len(args) > 1:
            options['expires_in_hours'] = args[1]
        if len(args) > 2:
            options['buyer_email'] = args[2]

        link = await self.services.payment_links.generate_payment_link(product_id, **options)
        await self.reply(update, "✅ Payment link created.\n\n" + self.messages.format_payment_link(link))

    @reply_on_error
    @admin_only
    async def pending_payments(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/pending"""
        pending = await self.services.payment_links.get_pending_payments()
        if not pending:
            await self.reply(update, "No payments are waiting for review.")
            return

        for link in pending:
            await update.effective_message.reply_text(
                self.messages.format_pending_payment(link),
                reply_markup=self.keyboards.confirm_payment(link.id)
            )

    @reply_on_error
    @admin_only
    async def confirm_payment(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/confirm <link_id> or the confirm button under /pending"""
        query = update.callback_query
        if query:
            try:
                link_id = int(query.data[len(CONFIRM_CALLBACK_PREFIX):])
            except ValueError:
                raise UsageError("confirm button is malformed")
        else:
            link_id = _int_arg(context.args or [], 0, "/confirm <link_id>")

        buyer_chats = context.bot_data.get('buyer_chats', {})
        try:
            link = await self.services.payment_links.confirm_payment(link_id)
        except PaylinkError:
            buyer_chats.pop(link_id, None)
            raise

        download_url = self.messages.download_url(link.download_token)
        await self.reply(
            update,
            f"✅ Payment #{link.id} confirmed.\n📥 Download link: {download_url}"
        )

        buyer_chat = buyer_chats.pop(link.id, None)
        if buyer_chat:
            await context.bot.send_message(
                chat_id=buyer_chat,
                text=(
                    "✅ Your payment was confirmed!\n\n"
                    f"📥 Download: {download_url}\n"
                    f"Or send /download {link.download_token}"
                )
            )

    @reply_on_error
    @admin_only
    async def dashboard(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/stats"""
        stats = await self.services.reports.get_dashboard_stats()
        await self.reply(update, self.messages.format_dashboard(stats))

    @reply_on_error
    @admin_only
    async def expire_links(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/expire"""
        count = await self.services.payment_links.expire_overdue_links()
        await self.reply(update, f"⌛️ {count} overdue payment link(s) expired.")
