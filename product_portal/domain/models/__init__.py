from product_portal.domain.models.product import ProductRecord

__all__ = ["ProductRecord"]
