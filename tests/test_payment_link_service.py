import asyncio
import re
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from paylink.config import Config
from paylink.exceptions import CodeAllocationError, InvalidStateError, NotFoundError
from paylink.models.payment_link import PaymentLinkStatus
from paylink.services import payment_link_service as service_module
from paylink.services.payment_link_service import PaymentLinkService
from paylink.utils.security import CODE_ALPHABET

PROOF = {
    "buyer_name": "John Doe",
    "buyer_email": "john@example.com",
    "payment_proof_url": "https://example.com/proof.jpg",
}


# generate

async def test_generate_payment_link_minimal(link_service, product):
    before = datetime.now(timezone.utc)
    link = await link_service.generate_payment_link(product.id)
    after = datetime.now(timezone.utc)

    assert link.product_id == product.id
    assert link.status == PaymentLinkStatus.PENDING
    assert len(link.unique_code) == Config.UNIQUE_CODE_LENGTH
    assert set(link.unique_code) <= set(CODE_ALPHABET)
    assert link.buyer_name is None
    assert link.buyer_email is None
    assert link.payment_instructions == Config.PAYMENT_INSTRUCTIONS
    assert link.confirmed_at is None
    assert link.download_token is None
    assert before + timedelta(hours=24) <= link.expires_at <= after + timedelta(hours=24)


async def test_generate_payment_link_with_buyer_and_custom_expiry(link_service, product):
    before = datetime.now(timezone.utc)
    link = await link_service.generate_payment_link(
        product.id,
        buyer_name="Jane",
        buyer_email="jane@example.com",
        expires_in_hours=2,
    )
    after = datetime.now(timezone.utc)

    assert link.buyer_name == "Jane"
    assert link.buyer_email == "jane@example.com"
    assert before + timedelta(hours=2) <= link.expires_at <= after + timedelta(hours=2)


async def test_generate_uses_injected_instructions(link_repo, product_repo, product):
    service = PaymentLinkService(link_repo, product_repo, payment_instructions="Wire to ACME 42")

    link = await service.generate_payment_link(product.id)

    assert link.payment_instructions == "Wire to ACME 42"


async def test_generate_unique_codes(link_service, product):
    links = [await link_service.generate_payment_link(product.id) for _ in range(50)]

    assert len({link.unique_code for link in links}) == 50


async def test_generate_for_missing_product(link_service):
    with pytest.raises(NotFoundError):
        await link_service.generate_payment_link(99999)


async def test_generate_for_inactive_product(link_service, inactive_product, store):
    with pytest.raises(InvalidStateError, match="not active"):
        await link_service.generate_payment_link(inactive_product.id)
    assert store.links == {}


@pytest.mark.parametrize("hours", [0, -5])
async def test_generate_rejects_non_positive_expiry(link_service, product, hours):
    with pytest.raises(ValidationError):
        await link_service.generate_payment_link(product.id, expires_in_hours=hours)


async def test_generate_rejects_malformed_email(link_service, product):
    with pytest.raises(ValidationError):
        await link_service.generate_payment_link(product.id, buyer_email="not-an-email")


async def test_generate_retries_on_code_collision(link_service, product, monkeypatch):
    codes = iter(["TAKENCODE1", "TAKENCODE1", "FRESHCODE1"])
    monkeypatch.setattr(service_module, "generate_unique_code", lambda length: next(codes))

    first = await link_service.generate_payment_link(product.id)
    second = await link_service.generate_payment_link(product.id)

    assert first.unique_code == "TAKENCODE1"
    assert second.unique_code == "FRESHCODE1"


async def test_generate_gives_up_after_configured_attempts(link_repo, product_repo, product, monkeypatch):
    monkeypatch.setattr(service_module, "generate_unique_code", lambda length: "SAMECODE99")
    service = PaymentLinkService(link_repo, product_repo, code_attempts=3)
    await service.generate_payment_link(product.id)

    with pytest.raises(CodeAllocationError):
        await service.generate_payment_link(product.id)


# upload proof

async def test_upload_payment_proof(link_service, product):
    link = await link_service.generate_payment_link(product.id)

    updated = await link_service.upload_payment_proof(link.unique_code, **PROOF)

    assert updated.id == link.id
    assert updated.status == PaymentLinkStatus.UPLOADED
    assert updated.buyer_name == "John Doe"
    assert updated.buyer_email == "john@example.com"
    assert updated.payment_proof_url == "https://example.com/proof.jpg"
    assert updated.updated_at > link.updated_at
    assert updated.download_token is None


async def test_upload_overwrites_placeholder_buyer(link_service, product):
    link = await link_service.generate_payment_link(
        product.id, buyer_name="Placeholder", buyer_email="old@example.com"
    )

    updated = await link_service.upload_payment_proof(link.unique_code, **PROOF)

    assert updated.buyer_name == "John Doe"
    assert updated.buyer_email == "john@example.com"


async def test_upload_unknown_code(link_service):
    with pytest.raises(NotFoundError):
        await link_service.upload_payment_proof("NOSUCHCODE", **PROOF)


@pytest.mark.parametrize("status", [
    PaymentLinkStatus.UPLOADED,
    PaymentLinkStatus.CONFIRMED,
    PaymentLinkStatus.EXPIRED,
])
async def test_upload_rejected_unless_pending(link_service, product, seed_link, store, status):
    link = seed_link(product.id, status, buyer_name="Original")

    with pytest.raises(InvalidStateError, match="not in pending status") as exc_info:
        await link_service.upload_payment_proof(link.unique_code, **PROOF)

    assert exc_info.value.status == status.value
    assert store.links[link.id] == link


@pytest.mark.parametrize("field, value", [
    ("buyer_email", "not-an-email"),
    ("payment_proof_url", "not a url"),
    ("buyer_name", ""),
])
async def test_upload_validates_input(link_service, product, store, field, value):
    link = await link_service.generate_payment_link(product.id)

    with pytest.raises(ValidationError):
        await link_service.upload_payment_proof(link.unique_code, **{**PROOF, field: value})
    assert store.links[link.id].status == PaymentLinkStatus.PENDING


async def test_upload_on_overdue_link_expires_it(link_service, product, seed_link, store):
    link = seed_link(product.id, expires_at=datetime.now(timezone.utc) - timedelta(minutes=1))

    with pytest.raises(InvalidStateError, match="expired"):
        await link_service.upload_payment_proof(link.unique_code, **PROOF)

    assert store.links[link.id].status == PaymentLinkStatus.EXPIRED
    assert store.links[link.id].payment_proof_url is None


# confirm

async def test_confirm_payment(link_service, uploaded_link):
    before = datetime.now(timezone.utc)
    confirmed = await link_service.confirm_payment(uploaded_link.id)

    assert confirmed.status == PaymentLinkStatus.CONFIRMED
    assert confirmed.confirmed_at >= before
    assert re.fullmatch(r"[0-9a-f]{64}", confirmed.download_token)
    assert confirmed.buyer_name == "John Doe"


async def test_confirm_twice_fails_and_keeps_token(link_service, uploaded_link, store):
    confirmed = await link_service.confirm_payment(uploaded_link.id)

    with pytest.raises(InvalidStateError, match="confirmed") as exc_info:
        await link_service.confirm_payment(uploaded_link.id)

    assert exc_info.value.status == "confirmed"
    assert store.links[uploaded_link.id].download_token == confirmed.download_token
    assert store.links[uploaded_link.id].confirmed_at == confirmed.confirmed_at


@pytest.mark.parametrize("status", [PaymentLinkStatus.PENDING, PaymentLinkStatus.EXPIRED])
async def test_confirm_rejected_unless_uploaded(link_service, product, seed_link, store, status):
    link = seed_link(product.id, status)

    with pytest.raises(InvalidStateError, match=f"'{status.value}'"):
        await link_service.confirm_payment(link.id)

    assert store.links[link.id] == link


async def test_confirm_missing_link(link_service):
    with pytest.raises(NotFoundError):
        await link_service.confirm_payment(99999)


async def test_concurrent_confirmations_issue_one_token(link_service, uploaded_link, store):
    results = await asyncio.gather(
        link_service.confirm_payment(uploaded_link.id),
        link_service.confirm_payment(uploaded_link.id),
        return_exceptions=True,
    )

    successes = [r for r in results if not isinstance(r, Exception)]
    failures = [r for r in results if isinstance(r, InvalidStateError)]
    assert len(successes) == 1
    assert len(failures) == 1
    assert store.links[uploaded_link.id].download_token == successes[0].download_token


async def test_tokens_are_distinct_across_links(link_service, product, seed_link):
    links = [seed_link(product.id, PaymentLinkStatus.UPLOADED) for _ in range(20)]

    tokens = {(await link_service.confirm_payment(link.id)).download_token for link in links}

    assert len(tokens) == 20


# download

async def test_download_product(link_service, uploaded_link):
    confirmed = await link_service.confirm_payment(uploaded_link.id)

    info = await link_service.download_product(confirmed.download_token)

    assert info.file_url == "https://example.com/file.pdf"
    assert info.file_name == "test-file.pdf"


@pytest.mark.parametrize("token", ["", "invalid-token", "0" * 64])
async def test_download_unknown_token(link_service, token):
    assert await link_service.download_product(token) is None


@pytest.mark.parametrize("status", [
    PaymentLinkStatus.PENDING,
    PaymentLinkStatus.UPLOADED,
    PaymentLinkStatus.EXPIRED,
])
async def test_download_requires_confirmed_link(link_service, product, seed_link, status):
    link = seed_link(product.id, status, download_token="a" * 64)

    assert await link_service.download_product("a" * 64) is None


async def test_download_requires_product_file(link_service, product_service, uploaded_link, product):
    confirmed = await link_service.confirm_payment(uploaded_link.id)
    await product_service.update_product(product.id, file_name=None)

    assert await link_service.download_product(confirmed.download_token) is None


# read models

async def test_get_payment_link_includes_product(link_service, product):
    link = await link_service.generate_payment_link(product.id)

    found = await link_service.get_payment_link(link.unique_code)

    assert found.id == link.id
    assert found.product.id == product.id
    assert found.product.price == Decimal("99.99")


async def test_get_payment_link_unknown_code(link_service):
    assert await link_service.get_payment_link("NOPE") is None


async def test_get_payment_link_expires_overdue_pending(link_service, product, seed_link, store):
    link = seed_link(product.id, expires_at=datetime.now(timezone.utc) - timedelta(hours=1))

    found = await link_service.get_payment_link(link.unique_code)

    assert found.status == PaymentLinkStatus.EXPIRED
    assert store.links[link.id].status == PaymentLinkStatus.EXPIRED


async def test_overdue_uploaded_link_is_still_confirmable(link_service, product, seed_link):
    link = seed_link(
        product.id,
        PaymentLinkStatus.UPLOADED,
        expires_at=datetime.now(timezone.utc) - timedelta(hours=1),
    )

    found = await link_service.get_payment_link(link.unique_code)
    assert found.status == PaymentLinkStatus.UPLOADED

    confirmed = await link_service.confirm_payment(link.id)
    assert confirmed.status == PaymentLinkStatus.CONFIRMED


async def test_get_pending_payments_newest_first(link_service, product, seed_link):
    older = seed_link(product.id, PaymentLinkStatus.UPLOADED)
    seed_link(product.id, PaymentLinkStatus.PENDING)
    seed_link(product.id, PaymentLinkStatus.CONFIRMED)
    newer = seed_link(product.id, PaymentLinkStatus.UPLOADED)

    pending = await link_service.get_pending_payments()

    assert [link.id for link in pending] == [newer.id, older.id]
    assert all(link.product.name == "Test Product" for link in pending)


async def test_get_pending_payments_empty(link_service):
    assert await link_service.get_pending_payments() == []


async def test_expire_overdue_links(link_service, product, seed_link, store):
    past = datetime.now(timezone.utc) - timedelta(minutes=5)
    overdue = seed_link(product.id, expires_at=past)
    fresh = seed_link(product.id)
    uploaded = seed_link(product.id, PaymentLinkStatus.UPLOADED, expires_at=past)

    assert await link_service.expire_overdue_links() == 1
    assert store.links[overdue.id].status == PaymentLinkStatus.EXPIRED
    assert store.links[fresh.id].status == PaymentLinkStatus.PENDING
    assert store.links[uploaded.id].status == PaymentLinkStatus.UPLOADED


async def test_full_purchase_flow(product_service, link_service):
    product = await product_service.create_product(
        name="Course",
        price=Decimal("99.99"),
        file_url="https://files.example.com/course.zip",
        file_name="course.zip",
    )
    link = await link_service.generate_payment_link(product.id, expires_in_hours=24)
    assert link.status == PaymentLinkStatus.PENDING

    uploaded = await link_service.upload_payment_proof(link.unique_code, **PROOF)
    assert uploaded.status == PaymentLinkStatus.UPLOADED

    confirmed = await link_service.confirm_payment(link.id)
    assert confirmed.status == PaymentLinkStatus.CONFIRMED
    assert len(confirmed.download_token) == 64

    info = await link_service.download_product(confirmed.download_token)
    assert info.file_url == "https://files.example.com/course.zip"
    assert info.file_name == "course.zip"

    assert await product_service.delete_product(product.id) is False
