# paylink/handlers/user_handlers.py
from pydantic import ValidationError
from telegram import Update
from telegram.ext import ContextTypes, ConversationHandler
from .base_handler import BaseHandler, UsageError, reply_on_error, validation_summary
from ..constants import WAITING_BUYER_NAME, WAITING_BUYER_EMAIL, WAITING_PROOF_URL
from ..exceptions import NotFoundError, PaylinkError
from ..models.payment_link import PaymentLinkStatus
from ..services.lifecycle import ensure_transition

class UserHandler(BaseHandler):
    """Buyer commands: open a link, upload proof, download"""

    @reply_on_error
    async def start(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/start, optionally with a payment code deep link"""
        if context.args:
            await self._show_link(update, context, context.args[0])
            return

        await self.reply(
            update,
            f"Hello {update.effective_user.first_name}! 👋\n\n"
            "Send /pay <code> with the code from your payment link."
        )

    @reply_on_error
    async def pay(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/pay <code>"""
        if not context.args:
            raise UsageError("/pay <code>")
        await self._show_link(update, context, context.args[0])

    async def _show_link(self, update: Update, context: ContextTypes.DEFAULT_TYPE, code: str):
        link = await self.services.payment_links.get_payment_link(code)
        if link is None:
            await self.reply(update, "❌ Payment link not found.")
            return

        if link.status == PaymentLinkStatus.PENDING:
            context.user_data['payment_code'] = link.unique_code
        await self.reply(update, self.messages.payment_info(link))

    @reply_on_error
    async def proof_start(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/proof [code] opens the upload conversation"""
        code = context.args[0] if context.args else context.user_data.get('payment_code')
        if not code:
            raise UsageError("/proof <code>")

        link = await self.services.payment_links.get_payment_link(code)
        if link is None:
            raise NotFoundError("Payment link", code)
        ensure_transition(link, PaymentLinkStatus.UPLOADED)

        context.user_data['proof'] = {'code': link.unique_code}
        await self.reply(
            update,
            "👤 Please enter the name used for the transfer:",
            reply_markup=self.keyboards.cancel()
        )
        return WAITING_BUYER_NAME

    async def proof_name(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        context.user_data['proof']['buyer_name'] = update.message.text.strip()
        await update.message.reply_text(
            "📧 Please enter your email address:",
            reply_markup=self.keyboards.cancel()
        )
        return WAITING_BUYER_EMAIL

    async def proof_email(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        context.user_data['proof']['buyer_email'] = update.message.text.strip()
        await update.message.reply_text(
            "🧾 Please send the URL of your transfer receipt:",
            reply_markup=self.keyboards.cancel()
        )
        return WAITING_PROOF_URL

    async def proof_url(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        proof = context.user_data.pop('proof', {})
        try:
            link = await self.services.payment_links.upload_payment_proof(
                proof.get('code', ''),
                buyer_name=proof.get('buyer_name', ''),
                buyer_email=proof.get('buyer_email', ''),
                payment_proof_url=update.message.text.strip()
            )
        except ValidationError as e:
            await update.message.reply_text(
                f"❌ Invalid input: {validation_summary(e)}\nSend /proof to try again."
            )
            return ConversationHandler.END
        except PaylinkError as e:
            await update.message.reply_text(f"❌ {e}")
            return ConversationHandler.END

        context.user_data.pop('payment_code', None)
        # link id -> buyer chat; entries leave when the admin confirms or the link stops being uploaded
        context.bot_data.setdefault('buyer_chats', {})[link.id] = update.effective_chat.id

        await update.message.reply_text(
            "✅ Payment proof received and waiting for review.\n"
            "You will get your download link here once it is confirmed."
        )
        return ConversationHandler.END

    @reply_on_error
    async def download(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/download <token>"""
        if not context.args:
            raise UsageError("/download <token>")

        info = await self.services.payment_links.download_product(context.args[0])
        if info is None:
            await self.reply(update, "❌ Download not found.")
            return

        await self.reply(update, f"📥 {info.file_name}\n{info.file_url}")
