import json

import pytest
from fastapi.testclient import TestClient

from valuninja.agents.llm import clear_fake_responses, get_scout_llm, queue_fake_error, queue_fake_response
from valuninja.api.routes.products import get_product_search_service
from valuninja.core.config import AppSettings
from valuninja.main import create_app
from valuninja.models.location import AffiliateConfig
from valuninja.services.products import ProductSearchService


def create_client(service: ProductSearchService) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_product_search_service] = lambda: service
    return TestClient(app)


def fake_service(api_key: str | None = "test-key") -> ProductSearchService:
    settings = AppSettings(_env_file=None, scout_llm_provider="fake")
    return ProductSearchService(
        get_scout_llm(settings),
        api_key=api_key,
        default_affiliates=AffiliateConfig(amazonTag="ninja-20"),
    )


@pytest.fixture(autouse=True)
def _reset_fake_backend():
    clear_fake_responses()
    yield
    clear_fake_responses()


def test_products_search_returns_ranked_products():
    payload = {
        "summary": "One verified pick.",
        "products": [
            {
                "brand": "Garmin",
                "name": "Forerunner 265",
                "price": "449.99",
                "storeName": "REI",
                "sourceUrl": "https://www.rei.com/product/forerunner-265",
                "valueBreakdown": {"performance": 9, "dealStrength": 6},
            }
        ],
    }
    queue_fake_response(json.dumps(payload), [("Forerunner 265 review", "https://reviews.test/fr265")])
    client = create_client(fake_service())

    res = client.post(
        "/products/search",
        json={
            "query": "running watch",
            "userValues": {"maxPrice": 500},
            "location": {"zipCode": "98101", "localOnly": True},
            "timeZone": "America/Los_Angeles",
        },
    )

    assert res.status_code == 200
    body = res.json()
    assert body["summary"] == "One verified pick."
    assert body["region"]["countryName"] == "USA"
    assert body["sources"] == [{"title": "Forerunner 265 review", "uri": "https://reviews.test/fr265"}]
    product = body["products"][0]
    assert product["price"] == 449.99
    assert product["retailers"][0]["isDirect"] is True
    assert "tag=ninja-20" in product["retailers"][-1]["url"]
    assert product["valueBreakdown"]["dealStrength"] == 6
    assert product["valueBreakdown"]["ergonomics"] == 7


def test_products_search_missing_credential():
    client = create_client(fake_service(api_key=None))

    res = client.post("/products/search", json={"query": "running watch"})

    assert res.status_code == 503
    body = res.json()
    assert body["error"]["type"] == "ENVIRONMENT_AUTH_FAILURE"
    assert body["error"]["message"].startswith("ENVIRONMENT_AUTH_FAILURE:")
    assert body["error"]["traceId"] == res.headers["X-Request-ID"]


def test_products_search_malformed_response():
    queue_fake_response("Sorry, I can't help with that.")
    client = create_client(fake_service())

    res = client.post("/products/search", json={"query": "running watch"})

    assert res.status_code == 502
    assert res.json()["error"]["type"] == "MALFORMED_RESPONSE"


def test_products_search_rejected_credential():
    queue_fake_error(Exception("API key not valid"))
    client = create_client(fake_service())

    res = client.post("/products/search", json={"query": "running watch"})

    assert res.status_code == 502
    assert res.json()["error"]["type"] == "API_REJECTED_CREDENTIALS"


def test_products_search_requires_query():
    client = create_client(fake_service())

    res = client.post("/products/search", json={"query": ""})

    assert res.status_code == 422
