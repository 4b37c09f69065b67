import base64
from typing import Optional

from product_portal.core.logging import get_logger

logger = get_logger(__name__)


class BasicAuthHandler:
    """Builds the Authorization header value sent to the API gateway."""

    def __init__(
        self,
        raw_header: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None
    ):
        """
        Initialize the basic authentication handler.

        Args:
            raw_header: Complete Authorization header value, used as-is
            username: Username for basic authentication
            password: Password for basic authentication
        """
        self.raw_header = raw_header
        self.username = username
        self.password = password

    def header_value(self) -> str:
        """
        Resolve the Authorization header value.

        A configured raw header wins. Otherwise a username/password pair is
        encoded as a Basic credential. With neither, an empty value is
        returned and the gateway decides how to treat the request.

        Returns:
            Authorization header value, possibly empty
        """
        if self.raw_header:
            return self.raw_header

        if self.username and self.password:
            return f"Basic {self.encode_credentials(self.username, self.password)}"

        if self.username or self.password:
            logger.warning("Incomplete basic auth credentials configured, sending empty Authorization header")
        return ""

    @staticmethod
    def encode_credentials(username: str, password: str) -> str:
        """
        Encode credentials to base64 for basic authentication.

        Args:
            username: Username
            password: Password

        Returns:
            Base64 encoded credentials
        """
        credentials = f"{username}:{password}"
        return base64.b64encode(credentials.encode("utf-8")).decode("utf-8")
