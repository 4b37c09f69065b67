"""Pytest configuration and fixtures for the product portal."""

import json
import re
from typing import Any, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from product_portal.api.dependencies import get_client_configuration, get_gateway_transport
from product_portal.clients.odata_client import AuthenticatedQueryClient, ClientConfiguration
from product_portal.main import app

BASE_URL = "https://gateway.example.com/odata"
CREDENTIAL = "Basic dXNlcjpzZWNyZXQ="
SUBSCRIPTION_KEY = "sub-key-123"
TRACE = "true"

_KEY_PATH = re.compile(r"/Products\('(?P<key>.*)'\)$")


class FakeGateway:
    """In-memory stand-in for the OData product service."""

    def __init__(self, products: Optional[List[Dict[str, Any]]] = None):
        self.products = [dict(product) for product in products or []]
        self.requests: List[httpx.Request] = []
        self.patch_returns_content = True
        self.honour_top = True
        self.fail_with: Optional[int] = None

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def find(self, key: str) -> Optional[Dict[str, Any]]:
        return next((p for p in self.products if p["Id"] == key), None)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.fail_with is not None:
            return httpx.Response(self.fail_with, text="upstream exploded")

        path = request.url.path
        match = _KEY_PATH.search(path)
        if match:
            key = match.group("key").replace("''", "'")
            product = self.find(key)
            if product is None:
                return httpx.Response(404, json={"error": {"code": "", "message": "Resource not found"}})
            if request.method == "GET":
                return httpx.Response(200, json=product)
            if request.method == "PATCH":
                product.update(json.loads(request.content))
                if self.patch_returns_content:
                    return httpx.Response(200, json=product)
                return httpx.Response(204)
            return httpx.Response(405)

        if path.endswith("/Products") and request.method == "GET":
            products = self.products
            if self.honour_top and "$top" in request.url.params:
                products = products[: int(request.url.params["$top"])]
            return httpx.Response(
                200,
                json={"@odata.context": f"{BASE_URL}/$metadata#Products", "value": products}
            )

        return httpx.Response(404)


def make_product(product_id: str, price: float = 10.5, **fields: Any) -> Dict[str, Any]:
    product = {"Id": product_id, "Price": price, "Name": f"Product {product_id}", "Category": "Tools"}
    product.update(fields)
    return product


@pytest.fixture
def gateway():
    """Gateway holding products 1..15 plus product 42."""
    products = [make_product(str(i), price=float(i)) for i in range(1, 16)]
    products.append(make_product("42", price=12.5, Name="Answer Lamp"))
    return FakeGateway(products)


@pytest.fixture
def client_config():
    return ClientConfiguration(
        base_url=BASE_URL,
        credential=CREDENTIAL,
        subscription_key=SUBSCRIPTION_KEY,
        trace=TRACE,
    )


@pytest_asyncio.fixture()
async def query_client(gateway, client_config):
    async with AuthenticatedQueryClient.configure(client_config, transport=gateway.transport()) as client:
        yield client


@pytest_asyncio.fixture()
async def client(gateway, client_config):
    """Return an HTTPX async client pointing at the FastAPI app, wired to the fake gateway."""
    app.dependency_overrides[get_client_configuration] = lambda: client_config
    app.dependency_overrides[get_gateway_transport] = gateway.transport
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://testserver",
        ) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_client_configuration, None)
        app.dependency_overrides.pop(get_gateway_transport, None)
