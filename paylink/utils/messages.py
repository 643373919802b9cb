# paylink/utils/messages.py
from ..config import Config
from ..models.product import Product
from ..models.payment_link import DashboardStats, PaymentLink, PaymentLinkStatus, PaymentLinkWithProduct
from ..utils.formatters import format_price, format_datetime

STATUS_EMOJI = {
    PaymentLinkStatus.PENDING: "⏳",
    PaymentLinkStatus.UPLOADED: "🔍",
    PaymentLinkStatus.CONFIRMED: "✅",
    PaymentLinkStatus.EXPIRED: "⌛️",
}

class Messages:
    @staticmethod
    def format_product(product: Product) -> str:
        """Product summary line block"""
        return (
            f"🏷 #{product.id} {product.name}\n"
            f"💰 Price: {format_price(product.price)}\n"
            f"📁 File: {product.file_name or '-'}\n"
            f"🔄 {'Active' if product.is_active else 'Inactive'}\n"
        )

    @staticmethod
    def share_url(link: PaymentLink) -> str:
        return f"{Config.PUBLIC_BASE_URL}/pay/{link.unique_code}"

    @staticmethod
    def download_url(token: str) -> str:
        return f"{Config.PUBLIC_BASE_URL}/download/{token}"

    @staticmethod
    def format_payment_link(link: PaymentLink) -> str:
        """Payment link details for the admin"""
        status = link.status
        return (
            f"🔗 Link #{link.id} · code {link.unique_code}\n"
            f"📊 Status: {STATUS_EMOJI[status]} {status.value}\n"
            f"👤 Buyer: {link.buyer_name or '-'} <{link.buyer_email or '-'}>\n"
            f"⏰ Expires: {format_datetime(link.expires_at)}\n"
            f"🌐 {Messages.share_url(link)}\n"
        )

    @staticmethod
    def format_pending_payment(link: PaymentLinkWithProduct) -> str:
        return (
            f"🔍 Payment #{link.id} for {link.product.name} "
            f"({format_price(link.product.price)})\n"
            f"👤 {link.buyer_name} <{link.buyer_email}>\n"
            f"🧾 Proof: {link.payment_proof_url}\n"
            f"🕒 {format_datetime(link.updated_at or link.created_at)}\n"
        )

    @staticmethod
    def payment_info(link: PaymentLinkWithProduct) -> str:
        """What the buyer sees when opening a link"""
        if link.status == PaymentLinkStatus.PENDING:
            return (
                f"🛍 {link.product.name}\n"
                f"💰 Amount: {format_price(link.product.price)}\n\n"
                f"💳 {link.payment_instructions}\n"
                f"⏰ Pay before: {format_datetime(link.expires_at)}\n\n"
                "🔹 After paying, send /proof to upload your transfer receipt."
            )
        if link.status == PaymentLinkStatus.UPLOADED:
            return "🔍 Your payment proof was received and is waiting for review."
        if link.status == PaymentLinkStatus.CONFIRMED:
            return "✅ Your payment was confirmed. Check your download link."
        return "⌛️ This payment link has expired."

    @staticmethod
    def format_dashboard(stats: DashboardStats) -> str:
        recent = "\n".join(
            f"{STATUS_EMOJI[link.status]} {link.unique_code} · {format_datetime(link.created_at)}"
            for link in stats.recent_payments
        ) or "-"
        return (
            "📈 Dashboard\n\n"
            f"Active products: {stats.total_products:,}\n"
            f"Confirmed sales: {stats.total_sales:,}\n"
            f"Awaiting review: {stats.pending_payments:,}\n"
            f"Revenue: {format_price(stats.total_revenue)}\n\n"
            f"Recent links:\n{recent}"
        )
