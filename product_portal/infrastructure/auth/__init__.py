from product_portal.infrastructure.auth.basic_auth import BasicAuthHandler

__all__ = ["BasicAuthHandler"]
