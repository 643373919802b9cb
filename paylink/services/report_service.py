# paylink/services/report_service.py
from ..models.payment_link import DashboardStats, PaymentLinkStatus

RECENT_PAYMENTS_LIMIT = 10

class ReportService:
    """Admin dashboard figures"""

    def __init__(self, products, payment_links):
        self.products = products
        self.payment_links = payment_links

    async def get_dashboard_stats(self) -> DashboardStats:
        return DashboardStats(
            total_products=await self.products.count_active(),
            total_sales=await self.payment_links.count_by_status(PaymentLinkStatus.CONFIRMED),
            pending_payments=await self.payment_links.count_by_status(PaymentLinkStatus.UPLOADED),
            total_revenue=await self.payment_links.confirmed_revenue(),
            recent_payments=await self.payment_links.list_recent(RECENT_PAYMENTS_LIMIT)
        )
