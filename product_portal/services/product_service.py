from decimal import Decimal
from typing import List

from product_portal.clients.odata_client import AuthenticatedQueryClient
from product_portal.core.logging import get_logger
from product_portal.domain.models.product import ProductRecord

logger = get_logger(__name__)


class ProductService:
    """Product use cases backed by the gateway client."""

    def __init__(self, client: AuthenticatedQueryClient, entity_set: str = "Products", page_size: int = 10):
        """Initialize with a configured gateway client."""
        self.client = client
        self.entity_set = entity_set
        self.page_size = page_size

    async def list_products(self) -> List[ProductRecord]:
        """Gets the first page of products."""
        logger.info(f"Listing top {self.page_size} {self.entity_set}")
        products = await self.client.list_top(self.entity_set, self.page_size)
        logger.debug(f"Retrieved {len(products)} products")
        return products

    async def get_product(self, product_id: str) -> ProductRecord:
        """Gets product by ID."""
        logger.info(f"Getting product {product_id}")
        return await self.client.get_by_key(self.entity_set, product_id)

    async def update_price(self, product_id: str, price: Decimal) -> ProductRecord:
        """Changes the price of one product, leaving its other fields alone."""
        logger.info(f"Updating price of product {product_id}")
        return await self.client.update_by_key(self.entity_set, product_id, {"price": price})
