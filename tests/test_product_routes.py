"""Tests for the product list and edit endpoints."""

import pytest

from product_portal.api.dependencies import get_client_configuration
from product_portal.clients.odata_client import ClientConfiguration
from product_portal.main import app


@pytest.mark.asyncio
async def test_list_products_shows_first_ten(client, gateway):
    response = await client.get("/products")

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 10
    assert [p["id"] for p in data["data"]] == [str(i) for i in range(1, 11)]
    assert data["data"][0]["price"] == 1.0
    assert data["data"][0]["Name"] == "Product 1"
    assert gateway.requests[-1].url.params["$top"] == "10"


@pytest.mark.asyncio
async def test_edit_page_returns_product(client):
    response = await client.get("/products/42/edit")

    assert response.status_code == 200
    data = response.json()
    assert data["product_id"] == "42"
    assert data["data"]["price"] == 12.5
    assert data["data"]["Name"] == "Answer Lamp"


@pytest.mark.asyncio
async def test_edit_page_for_unknown_product_is_404(client):
    response = await client.get("/products/missing/edit", headers={"X-Correlation-ID": "corr-1"})

    assert response.status_code == 404
    error = response.json()["error"]
    assert error["code"] == "not_found_error"
    assert error["context"]["resource_id"] == "missing"
    assert error["request_id"] == "corr-1"
    assert response.headers["X-Correlation-ID"] == "corr-1"


@pytest.mark.asyncio
async def test_submit_edit_updates_price_and_redirects(client, gateway):
    response = await client.post("/products/edit", json={"id": "42", "price": 19.99})

    assert response.status_code == 303
    assert response.headers["location"].endswith("/products")

    patch = gateway.requests[-1]
    assert patch.method == "PATCH"
    product = gateway.find("42")
    assert product["Price"] == 19.99
    assert product["Name"] == "Answer Lamp"
    assert product["Category"] == "Tools"


@pytest.mark.asyncio
async def test_list_reflects_update(client, gateway):
    await client.post("/products/edit", json={"id": "3", "price": 99})

    response = await client.get("/products")

    assert response.json()["data"][2] == {"id": "3", "price": 99.0, "Name": "Product 3", "Category": "Tools"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"id": "42"},
        {"price": 10},
        {"id": "", "price": 10},
        {"id": "42", "price": -1},
        {"id": "42", "price": "cheap"},
    ],
)
async def test_submit_edit_rejects_invalid_form(client, gateway, body):
    response = await client.post("/products/edit", json=body)

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "validation_error"
    assert gateway.requests == []


@pytest.mark.asyncio
async def test_submit_edit_for_unknown_product_is_404(client):
    response = await client.post("/products/edit", json={"id": "nope", "price": 1})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_gateway_failure_is_502_without_upstream_body(client, gateway):
    gateway.fail_with = 503

    response = await client.get("/products")

    assert response.status_code == 502
    error = response.json()["error"]
    assert error["code"] == "query_error"
    assert error["context"]["upstream_status"] == 503
    assert "body" not in error["context"]
    assert "upstream exploded" not in response.text


@pytest.mark.asyncio
async def test_unconfigured_gateway_is_configuration_error(client, gateway):
    app.dependency_overrides[get_client_configuration] = lambda: ClientConfiguration(base_url="")

    response = await client.get("/products")

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "configuration_error"
    assert gateway.requests == []


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_invalid_gateway_port_is_configuration_error(client, gateway):
    app.dependency_overrides[get_client_configuration] = lambda: ClientConfiguration(
        base_url="http://gateway.example.com:abc/odata"
    )

    response = await client.get("/products")

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "configuration_error"
    assert gateway.requests == []
