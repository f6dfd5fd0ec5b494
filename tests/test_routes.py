import httpx
import pytest
from fastapi.testclient import TestClient

from proplens.agent.workflows import MARKET_ANALYSIS_HTML, STRATEGY_FALLBACK_NOTICE
from proplens.api.app import create_app
from proplens.providers import ModelTurn

from .conftest import make_listing


@pytest.fixture
def client(settings):
    """App that builds its own container in the lifespan; no provider credentials"""
    with TestClient(create_app(settings)) as test_client:
        yield test_client


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body['database'] is True
    assert body['providers'] == {'openai': False, 'anthropic': False, 'gemini': False}


def test_missing_property_id_is_rejected(client):
    response = client.get("/api/property/analysis")

    assert response.status_code == 400
    assert response.json()['detail'] == "Property ID parameter is required"


def test_unknown_property_is_404(client):
    assert client.get("/api/property/valuation", params={"property_id": "missing"}).status_code == 404
    assert client.get("/api/property/cma", params={"property_id": "missing"}).status_code == 404
    assert client.get("/api/property/realtime", params={"property_id": "missing"}).status_code == 404


def test_unknown_agent_is_404(client):
    response = client.post("/api/agents/crystal-ball/run", json={"prompt": "hello"})

    assert response.status_code == 404
    assert response.json()['detail'] == "Agent crystal-ball not found"


def test_static_market_analysis(client):
    response = client.get("/api/market/analysis")

    assert response.json() == {"analysis": MARKET_ANALYSIS_HTML}


def test_strategy_fallback(client):
    response = client.post("/api/investment/strategy", json={"region": "Austin, TX"})

    body = response.json()
    assert response.status_code == 200
    assert body['notice'] == STRATEGY_FALLBACK_NOTICE
    assert "Given your budget of $250,000" in body['strategy']
    assert body['strategy'].startswith("# Investment Strategy for Austin, TX")


def test_strategy_requires_region(client):
    assert client.post("/api/investment/strategy", json={}).status_code == 422


def test_market_insights_and_zones(client):
    insights = client.get("/api/market/insights", params={"region": "Austin, TX"})
    zones = client.get("/api/market/opportunity-zones", params={"region": "Austin"})

    assert insights.json()['insights']['region'] == "Austin, TX"
    assert len(zones.json()['zones']) == 3
    assert client.get("/api/market/insights").status_code == 400


def test_agent_network_reports_per_agent(client):
    response = client.post("/api/agents/network", json={"prompts": {"market-analyzer": "a", "crystal-ball": "b"}})

    results = response.json()['results']
    assert results['crystal-ball'] == "Error: Agent crystal-ball not found"
    assert results['market-analyzer'].startswith("# AI Analysis Currently Unavailable")


@pytest.mark.anyio
async def test_search_and_save_over_container(container, models):
    listing = make_listing()
    await container.repository.add_all([listing, make_listing(city="Denver", state="CO")])
    models["openai"].turns = [ModelTurn(text="Austin is balanced")]
    app = create_app(container=container)

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as http:
        search = await http.get("/api/properties", params={"location": "Austin, TX"})
        saved = await http.post("/api/properties/saved/toggle", json={"user_id": "u1", "listing_id": listing.id})
        unsaved = await http.post("/api/properties/saved/toggle", json={"user_id": "u1", "listing_id": listing.id})
        missing = await http.post("/api/properties/saved/toggle", json={"user_id": "u1", "listing_id": "missing"})
        agent = await http.post("/api/agents/market-analyzer/run", json={"prompt": "How is Austin?"})

    assert [p['id'] for p in search.json()['properties']] == [listing.id]
    assert saved.json()['saved'] is True
    assert unsaved.json()['saved'] is False
    assert missing.status_code == 404
    assert agent.json() == {"agent": "market-analyzer", "response": "Austin is balanced"}
