from typing import AsyncIterator, Optional

import httpx
from fastapi import Depends

from product_portal.clients.odata_client import AuthenticatedQueryClient, ClientConfiguration
from product_portal.core.config import Settings, get_settings
from product_portal.core.logging import get_logger
from product_portal.infrastructure.auth.basic_auth import BasicAuthHandler
from product_portal.services.product_service import ProductService

# Initialize logger
logger = get_logger(__name__)


def get_client_configuration(settings: Settings = Depends(get_settings)) -> ClientConfiguration:
    """
    Build the gateway client configuration for the current request.

    Args:
        settings: Process-wide settings

    Returns:
        ClientConfiguration: Base URL and gateway header values
    """
    apim = settings.apim
    auth = BasicAuthHandler(
        raw_header=apim.BASIC_AUTH,
        username=apim.USERNAME,
        password=apim.PASSWORD
    )
    return ClientConfiguration(
        base_url=apim.BASE_URL,
        credential=auth.header_value(),
        subscription_key=apim.SUBSCRIPTION_KEY,
        trace=apim.TRACE,
        timeout=apim.TIMEOUT
    )


def get_gateway_transport() -> Optional[httpx.AsyncBaseTransport]:
    """
    Transport used by the gateway client.

    Returns None so httpx uses its default network transport; tests override
    this dependency with a stub.
    """
    return None


async def get_query_client(
    config: ClientConfiguration = Depends(get_client_configuration),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_gateway_transport)
) -> AsyncIterator[AuthenticatedQueryClient]:
    """
    Provide a gateway client scoped to the current request.

    Yields:
        AuthenticatedQueryClient: Configured client, closed after the request
    """
    async with AuthenticatedQueryClient.configure(config, transport=transport) as client:
        yield client


def get_product_service(
    client: AuthenticatedQueryClient = Depends(get_query_client),
    settings: Settings = Depends(get_settings)
) -> ProductService:
    """
    Provide the product service for the current request.

    Returns:
        ProductService: Service bound to the request's gateway client
    """
    return ProductService(
        client,
        entity_set=settings.apim.ENTITY_SET,
        page_size=settings.apim.PAGE_SIZE
    )
