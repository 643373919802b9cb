# paylink/services/container.py
from ..config import Config
from ..database.payment_link_repository import PaymentLinkRepository
from ..database.product_repository import ProductRepository
from .payment_link_service import PaymentLinkService
from .product_service import ProductService
from .report_service import ReportService

class Services:
    """Wires the services to one pair of repositories"""

    def __init__(self, products, payment_links):
        self.products = ProductService(products, payment_links)
        self.payment_links = PaymentLinkService(
            payment_links,
            products,
            payment_instructions=Config.PAYMENT_INSTRUCTIONS
        )
        self.reports = ReportService(products, payment_links)

    @classmethod
    def from_database(cls, db) -> "Services":
        return cls(ProductRepository(db), PaymentLinkRepository(db))
