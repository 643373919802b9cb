# paylink/models/payment_link.py
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from pydantic import AnyHttpUrl, BaseModel, EmailStr, Field, TypeAdapter, field_validator
from .base import TimeStampedModel
from .product import Product
from ..config import Config

class PaymentLinkStatus(str, Enum):
    PENDING = "pending"
    UPLOADED = "uploaded"
    CONFIRMED = "confirmed"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self in (PaymentLinkStatus.CONFIRMED, PaymentLinkStatus.EXPIRED)


class PaymentLink(TimeStampedModel):
    """Shareable reference to a single pending purchase"""
    product_id: int
    unique_code: str
    buyer_name: Optional[str] = None
    buyer_email: Optional[str] = None
    status: PaymentLinkStatus = PaymentLinkStatus.PENDING
    payment_proof_url: Optional[str] = None
    payment_instructions: str
    expires_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    download_token: Optional[str] = None

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """A pending link past its deadline is due for expiry"""
        if self.status != PaymentLinkStatus.PENDING or self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return self.expires_at <= now


class PaymentLinkWithProduct(PaymentLink):
    product: Product


class GeneratePaymentLinkInput(BaseModel):
    product_id: int
    buyer_name: Optional[str] = None
    buyer_email: Optional[EmailStr] = None
    expires_in_hours: float = Field(default_factory=lambda: Config.DEFAULT_LINK_HOURS, gt=0)


_http_url = TypeAdapter(AnyHttpUrl)


class UploadPaymentProofInput(BaseModel):
    payment_link_code: str = Field(..., min_length=1)
    buyer_name: str = Field(..., min_length=1)
    buyer_email: EmailStr
    payment_proof_url: str

    @field_validator('payment_proof_url')
    @classmethod
    def valid_url(cls, value: str) -> str:
        # validated as a URL but stored exactly as given
        _http_url.validate_python(value)
        return value


class DownloadInfo(BaseModel):
    file_url: str
    file_name: str


class DashboardStats(BaseModel):
    total_products: int
    total_sales: int
    pending_payments: int
    total_revenue: Decimal
    recent_payments: List[PaymentLink]
