from decimal import Decimal

import pytest

from paylink.config import Config
from paylink.models.payment_link import PaymentLinkStatus
from paylink.services.container import Services
from tests.fakes import FakePaymentLinkRepository, FakeProductRepository, FakeStore

ADMIN_ID = 1001
BUYER_ID = 2002


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def product_repo(store):
    return FakeProductRepository(store)


@pytest.fixture
def link_repo(store):
    return FakePaymentLinkRepository(store)


@pytest.fixture
def services(product_repo, link_repo):
    return Services(product_repo, link_repo)


@pytest.fixture
def product_service(services):
    return services.products


@pytest.fixture
def link_service(services):
    return services.payment_links


@pytest.fixture
def admin_ids(monkeypatch):
    monkeypatch.setattr(Config, "ADMIN_IDS", [ADMIN_ID])
    return [ADMIN_ID]


@pytest.fixture
async def product(product_service):
    return await product_service.create_product(
        name="Test Product",
        description="A product for testing",
        price=Decimal("99.99"),
        file_url="https://example.com/file.pdf",
        file_name="test-file.pdf",
    )


@pytest.fixture
async def inactive_product(product_service):
    return await product_service.create_product(
        name="Inactive Product",
        price=Decimal("10.00"),
        is_active=False,
    )


@pytest.fixture
def seed_link(store):
    """Insert a link directly in a given status"""
    def _seed(product_id, status=PaymentLinkStatus.PENDING, **fields):
        return store.add_link(product_id, status, **fields)
    return _seed


@pytest.fixture
async def uploaded_link(link_service, product):
    link = await link_service.generate_payment_link(product.id)
    return await link_service.upload_payment_proof(
        link.unique_code,
        buyer_name="John Doe",
        buyer_email="john@example.com",
        payment_proof_url="https://example.com/proof.jpg",
    )
