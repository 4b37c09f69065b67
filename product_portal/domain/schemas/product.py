from decimal import Decimal
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from product_portal.domain.models.product import ProductRecord


class EditProductRequest(BaseModel):
    """Body of the product edit form."""
    id: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)


class ProductResponse(BaseModel):
    """Single product, as shown on the edit page."""
    data: Dict[str, Any]
    product_id: str

    @classmethod
    def from_record(cls, record: ProductRecord) -> "ProductResponse":
        return cls(data=record.model_dump(mode="json"), product_id=record.id)


class ProductListResponse(BaseModel):
    """Product list page."""
    data: List[Dict[str, Any]]
    count: int

    @classmethod
    def from_records(cls, records: List[ProductRecord]) -> "ProductListResponse":
        return cls(
            data=[record.model_dump(mode="json") for record in records],
            count=len(records)
        )
