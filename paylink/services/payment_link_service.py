# paylink/services/payment_link_service.py
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from ..config import Config
from ..exceptions import CodeAllocationError, InvalidStateError, NotFoundError
from ..models.payment_link import (
    DownloadInfo,
    GeneratePaymentLinkInput,
    PaymentLink,
    PaymentLinkStatus,
    PaymentLinkWithProduct,
    UploadPaymentProofInput,
)
from ..utils.security import generate_download_token, generate_unique_code
from .lifecycle import ensure_transition, rejection_message

class PaymentLinkService:
    """Payment link lifecycle: generate, upload proof, confirm, redeem.

    Every status change is written as a conditional update on the current
    status, so two concurrent requests cannot both win the same transition.
    """

    def __init__(self, payment_links, products,
                 payment_instructions: Optional[str] = None,
                 code_length: Optional[int] = None,
                 code_attempts: Optional[int] = None):
        self.payment_links = payment_links
        self.products = products
        self.payment_instructions = payment_instructions or Config.PAYMENT_INSTRUCTIONS
        self.code_length = code_length or Config.UNIQUE_CODE_LENGTH
        self.code_attempts = code_attempts or Config.CODE_GENERATION_ATTEMPTS
        self.logger = logging.getLogger(__name__)

    async def generate_payment_link(self, product_id: int, **options) -> PaymentLink:
        """Create a pending link for an active product"""
        data = GeneratePaymentLinkInput(product_id=product_id, **options)

        product = await self.products.get(data.product_id)
        if product is None:
            raise NotFoundError("Product", data.product_id)
        if not product.is_active:
            raise InvalidStateError("Product is not active", status="inactive")

        expires_at = datetime.now(timezone.utc) + timedelta(hours=data.expires_in_hours)

        for attempt in range(1, self.code_attempts + 1):
            link = await self.payment_links.create({
                'product_id': data.product_id,
                'unique_code': generate_unique_code(self.code_length),
                'buyer_name': data.buyer_name or None,
                'buyer_email': data.buyer_email or None,
                'payment_instructions': self.payment_instructions,
                'expires_at': expires_at,
            })
            if link is not None:
                self.logger.info(
                    f"Payment link {link.id} ({link.unique_code}) generated for product {product_id}"
                )
                return link
            self.logger.warning(f"Payment link code collision (attempt {attempt})")

        raise CodeAllocationError(
            f"Could not allocate a unique code after {self.code_attempts} attempts"
        )

    async def get_payment_link(self, code: str) -> Optional[PaymentLinkWithProduct]:
        """Look up a link with its product; overdue pending links are expired first"""
        link = await self.payment_links.get_with_product(code)
        if link is None:
            return None
        if link.is_overdue():
            await self._expire(link)
            link = await self.payment_links.get_with_product(code)
        return link

    async def upload_payment_proof(self, payment_link_code: str, **proof) -> PaymentLink:
        """Attach buyer details and proof of transfer to a pending link"""
        data = UploadPaymentProofInput(payment_link_code=payment_link_code, **proof)

        link = await self.payment_links.get_by_code(data.payment_link_code)
        if link is None:
            raise NotFoundError("Payment link", data.payment_link_code)
        if link.is_overdue():
            link = await self._expire(link)

        ensure_transition(link, PaymentLinkStatus.UPLOADED)
        updated = await self.payment_links.transition(
            link.id,
            PaymentLinkStatus.PENDING,
            PaymentLinkStatus.UPLOADED,
            {
                'buyer_name': data.buyer_name,
                'buyer_email': data.buyer_email,
                'payment_proof_url': data.payment_proof_url,
            }
        )
        if updated is None:
            raise await self._lost_race(link.id, PaymentLinkStatus.UPLOADED)

        self.logger.info(f"Payment proof uploaded for link {updated.id}")
        return updated

    async def confirm_payment(self, payment_link_id: int) -> PaymentLink:
        """Confirm an uploaded payment and mint its download token"""
        now = datetime.now(timezone.utc)
        updated = await self.payment_links.transition(
            payment_link_id,
            PaymentLinkStatus.UPLOADED,
            PaymentLinkStatus.CONFIRMED,
            {
                'download_token': generate_download_token(),
                'confirmed_at': now,
            }
        )
        if updated is None:
            raise await self._lost_race(payment_link_id, PaymentLinkStatus.CONFIRMED)

        self.logger.info(f"Payment link {payment_link_id} confirmed")
        return updated

    async def download_product(self, token: str) -> Optional[DownloadInfo]:
        """Resolve a download token; every failure is the same None"""
        if not token:
            return None
        link = await self.payment_links.get_by_token(token)
        if link is None or link.status != PaymentLinkStatus.CONFIRMED:
            return None

        product = await self.products.get(link.product_id)
        if product is None or not product.has_file:
            return None

        return DownloadInfo(file_url=product.file_url, file_name=product.file_name)

    async def get_pending_payments(self) -> List[PaymentLinkWithProduct]:
        """Links awaiting admin review, newest first"""
        return await self.payment_links.list_with_product_by_status(PaymentLinkStatus.UPLOADED)

    async def expire_overdue_links(self) -> int:
        count = await self.payment_links.expire_overdue(datetime.now(timezone.utc))
        if count:
            self.logger.info(f"Expired {count} overdue payment link(s)")
        return count

    async def _expire(self, link: PaymentLink) -> PaymentLink:
        expired = await self.payment_links.transition(
            link.id, PaymentLinkStatus.PENDING, PaymentLinkStatus.EXPIRED
        )
        if expired is None:
            # someone else moved it first
            return await self.payment_links.get_by_id(link.id)
        self.logger.info(f"Payment link {link.id} expired")
        return expired

    async def _lost_race(self, link_id: int, target: PaymentLinkStatus) -> Exception:
        """Explain why a conditional update matched no row"""
        current = await self.payment_links.get_by_id(link_id)
        if current is None:
            return NotFoundError("Payment link", link_id)
        self.logger.info(
            f"Payment link {link_id} rejected move to {target.value} from {current.status.value}"
        )
        return InvalidStateError(rejection_message(current, target), status=current.status.value)
