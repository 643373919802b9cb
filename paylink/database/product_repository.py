# paylink/database/product_repository.py
from typing import Any, Dict, List, Optional
from ..models.product import Product

PRODUCT_COLUMNS = ('name', 'description', 'price', 'file_url', 'file_name', 'is_active')

class ProductRepository:
    """SQL access to the products table"""

    def __init__(self, db):
        self.db = db

    async def create(self, product_data: Dict[str, Any]) -> Product:
        async with self.db.pool.acquire() as conn:
            row = await conn.fetchrow("""
                INSERT INTO products (
                    name, description, price, file_url, file_name, is_active
                ) VALUES ($1, $2, $3, $4, $5, $6)
                RETURNING *
            """,
                product_data['name'],
                product_data.get('description'),
                product_data['price'],
                product_data.get('file_url'),
                product_data.get('file_name'),
                product_data.get('is_active', True)
            )
            return Product.model_validate(dict(row))

    async def get(self, product_id: int) -> Optional[Product]:
        async with self.db.pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM products WHERE id = $1", product_id
            )
            return Product.model_validate(dict(row)) if row else None

    async def list_all(self) -> List[Product]:
        """Active products first, newest first within each group"""
        async with self.db.pool.acquire() as conn:
            rows = await conn.fetch("""
                SELECT * FROM products
                ORDER BY is_active DESC, created_at DESC, id DESC
            """)
            return [Product.model_validate(dict(r)) for r in rows]

    async def update(self, product_id: int, changes: Dict[str, Any]) -> Optional[Product]:
        """Apply only the given columns; returns None when the row is missing"""
        query = "UPDATE products SET updated_at = NOW()"
        params = []
        param_index = 1

        for column in PRODUCT_COLUMNS:
            if column in changes:
                query += f", {column} = ${param_index}"
                params.append(changes[column])
                param_index += 1

        query += f" WHERE id = ${param_index} RETURNING *"
        params.append(product_id)

        async with self.db.pool.acquire() as conn:
            row = await conn.fetchrow(query, *params)
            return Product.model_validate(dict(row)) if row else None

    async def count_active(self) -> int:
        async with self.db.pool.acquire() as conn:
            return await conn.fetchval(
                "SELECT COUNT(*) FROM products WHERE is_active = true"
            )

    async def delete_with_expired_links(self, product_id: int) -> bool:
        """Delete the product and its expired links in one transaction.

        The product row is locked first; the delete only goes ahead if no
        non-expired link references it at that point.
        """
        async with self.db.transaction() as conn:
            locked = await conn.fetchval(
                "SELECT id FROM products WHERE id = $1 FOR UPDATE", product_id
            )
            if locked is None:
                return False

            blocked = await conn.fetchval("""
                SELECT EXISTS (
                    SELECT 1 FROM payment_links
                    WHERE product_id = $1 AND status <> 'expired'
                )
            """, product_id)
            if blocked:
                return False

            await conn.execute("""
                DELETE FROM payment_links
                WHERE product_id = $1 AND status = 'expired'
            """, product_id)
            result = await conn.execute(
                "DELETE FROM products WHERE id = $1", product_id
            )
            return result == "DELETE 1"
