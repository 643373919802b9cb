# paylink/database/payment_link_repository.py
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from ..models.payment_link import PaymentLink, PaymentLinkStatus, PaymentLinkWithProduct

# columns a status transition may write alongside the status itself
TRANSITION_COLUMNS = (
    'buyer_name', 'buyer_email', 'payment_proof_url', 'confirmed_at', 'download_token'
)

LINK_WITH_PRODUCT_SELECT = """
    SELECT pl.*,
        p.id AS product__id,
        p.name AS product__name,
        p.description AS product__description,
        p.price AS product__price,
        p.file_url AS product__file_url,
        p.file_name AS product__file_name,
        p.is_active AS product__is_active,
        p.created_at AS product__created_at,
        p.updated_at AS product__updated_at
    FROM payment_links pl
    JOIN products p ON p.id = pl.product_id
"""

def _link(row) -> Optional[PaymentLink]:
    return PaymentLink.model_validate(dict(row)) if row else None

def _link_with_product(row) -> PaymentLinkWithProduct:
    data = dict(row)
    prefix = 'product__'
    data['product'] = {
        key[len(prefix):]: data.pop(key)
        for key in list(data) if key.startswith(prefix)
    }
    return PaymentLinkWithProduct.model_validate(data)


class PaymentLinkRepository:
    """SQL access to the payment_links table"""

    def __init__(self, db):
        self.db = db

    async def create(self, link_data: Dict[str, Any]) -> Optional[PaymentLink]:
        """Insert a pending link; returns None if the code is already taken"""
        async with self.db.pool.acquire() as conn:
            row = await conn.fetchrow("""
                INSERT INTO payment_links (
                    product_id, unique_code, buyer_name, buyer_email,
                    status, payment_instructions, expires_at
                ) VALUES ($1, $2, $3, $4, $5, $6, $7)
                ON CONFLICT (unique_code) DO NOTHING
                RETURNING *
            """,
                link_data['product_id'],
                link_data['unique_code'],
                link_data.get('buyer_name'),
                link_data.get('buyer_email'),
                PaymentLinkStatus.PENDING.value,
                link_data['payment_instructions'],
                link_data.get('expires_at')
            )
            return _link(row)

    async def get_by_id(self, link_id: int) -> Optional[PaymentLink]:
        async with self.db.pool.acquire() as conn:
            return _link(await conn.fetchrow(
                "SELECT * FROM payment_links WHERE id = $1", link_id
            ))

    async def get_by_code(self, code: str) -> Optional[PaymentLink]:
        async with self.db.pool.acquire() as conn:
            return _link(await conn.fetchrow(
                "SELECT * FROM payment_links WHERE unique_code = $1", code
            ))

    async def get_by_token(self, token: str) -> Optional[PaymentLink]:
        async with self.db.pool.acquire() as conn:
            return _link(await conn.fetchrow(
                "SELECT * FROM payment_links WHERE download_token = $1", token
            ))

    async def get_with_product(self, code: str) -> Optional[PaymentLinkWithProduct]:
        async with self.db.pool.acquire() as conn:
            row = await conn.fetchrow(
                LINK_WITH_PRODUCT_SELECT + " WHERE pl.unique_code = $1", code
            )
            return _link_with_product(row) if row else None

    async def transition(self, link_id: int, from_status: PaymentLinkStatus,
                         to_status: PaymentLinkStatus,
                         changes: Optional[Dict[str, Any]] = None) -> Optional[PaymentLink]:
        """Compare-and-swap on status.

        The row is only written if it is still in ``from_status``; returns the
        updated link, or None when nothing matched.
        """
        changes = changes or {}
        query = "UPDATE payment_links SET status = $1, updated_at = NOW()"
        params: List[Any] = [to_status.value]
        param_index = 2

        for column in TRANSITION_COLUMNS:
            if column in changes:
                query += f", {column} = ${param_index}"
                params.append(changes[column])
                param_index += 1

        query += f" WHERE id = ${param_index} AND status = ${param_index + 1} RETURNING *"
        params.extend([link_id, from_status.value])

        async with self.db.pool.acquire() as conn:
            return _link(await conn.fetchrow(query, *params))

    async def list_for_product(self, product_id: int) -> List[PaymentLink]:
        async with self.db.pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT * FROM payment_links WHERE product_id = $1 ORDER BY id",
                product_id
            )
            return [_link(r) for r in rows]

    async def list_with_product_by_status(self, status: PaymentLinkStatus) -> List[PaymentLinkWithProduct]:
        async with self.db.pool.acquire() as conn:
            rows = await conn.fetch(
                LINK_WITH_PRODUCT_SELECT
                + " WHERE pl.status = $1 ORDER BY pl.created_at DESC, pl.id DESC",
                status.value
            )
            return [_link_with_product(r) for r in rows]

    async def list_recent(self, limit: int = 10) -> List[PaymentLink]:
        async with self.db.pool.acquire() as conn:
            rows = await conn.fetch("""
                SELECT * FROM payment_links
                ORDER BY created_at DESC, id DESC
                LIMIT $1
            """, limit)
            return [_link(r) for r in rows]

    async def count_by_status(self, status: PaymentLinkStatus) -> int:
        async with self.db.pool.acquire() as conn:
            return await conn.fetchval(
                "SELECT COUNT(*) FROM payment_links WHERE status = $1", status.value
            )

    async def confirmed_revenue(self) -> Decimal:
        async with self.db.pool.acquire() as conn:
            total = await conn.fetchval("""
                SELECT COALESCE(SUM(p.price), 0)
                FROM payment_links pl
                JOIN products p ON p.id = pl.product_id
                WHERE pl.status = 'confirmed'
            """)
            return Decimal(total)

    async def expire_overdue(self, now: datetime) -> int:
        """Expire every pending link whose deadline has passed"""
        async with self.db.pool.acquire() as conn:
            result = await conn.execute("""
                UPDATE payment_links
                SET status = 'expired', updated_at = NOW()
                WHERE status = 'pending'
                AND expires_at IS NOT NULL
                AND expires_at <= $1
            """, now)
            return int(result.split()[-1])
