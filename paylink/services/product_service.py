# paylink/services/product_service.py
import logging
from typing import List, Optional
from ..exceptions import NotFoundError
from ..models.payment_link import PaymentLinkStatus
from ..models.product import Product, ProductCreate, ProductUpdate

class ProductService:
    def __init__(self, products, payment_links):
        self.products = products
        self.payment_links = payment_links
        self.logger = logging.getLogger(__name__)

    async def create_product(self, **product_data) -> Product:
        """Create a product; raises pydantic.ValidationError on bad input"""
        data = ProductCreate(**product_data)
        product = await self.products.create(data.model_dump())
        self.logger.info(f"Product {product.id} created")
        return product

    async def get_products(self) -> List[Product]:
        return await self.products.list_all()

    async def get_product(self, product_id: int) -> Optional[Product]:
        return await self.products.get(product_id)

    async def update_product(self, product_id: int, **fields) -> Product:
        """Partial update; unspecified fields keep their stored value"""
        changes = ProductUpdate(**fields).changes()
        product = await self.products.update(product_id, changes)
        if product is None:
            raise NotFoundError("Product", product_id)
        self.logger.info(f"Product {product_id} updated: {', '.join(changes) or 'no fields'}")
        return product

    async def delete_product(self, product_id: int) -> bool:
        """Delete a product unless a non-expired payment link still uses it.

        Missing products and blocked deletions both return False.
        """
        product = await self.products.get(product_id)
        if product is None:
            return False

        links = await self.payment_links.list_for_product(product_id)
        live = [link for link in links if link.status != PaymentLinkStatus.EXPIRED]
        if live:
            self.logger.info(
                f"Product {product_id} not deleted: {len(live)} payment link(s) not expired"
            )
            return False

        deleted = await self.products.delete_with_expired_links(product_id)
        if deleted:
            self.logger.info(f"Product {product_id} deleted with {len(links)} expired link(s)")
        return deleted
