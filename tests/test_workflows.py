import pytest

from proplens.agent import AgentRunner, InvestmentWorkflows, StrategyRequest
from proplens.agent.workflows import (
    DEAL_ANALYSIS_HTML,
    MARKET_ANALYSIS_HTML,
    MARKET_PREDICTION_HTML,
    OPPORTUNITY_ANALYSIS_UNAVAILABLE,
    STRATEGY_FALLBACK_NOTICE,
)
from proplens.exceptions import PropertyNotFound
from proplens.providers import ModelTurn, ProviderRegistry

from .conftest import fake_factories, make_listing

pytestmark = pytest.mark.anyio


@pytest.fixture
def offline(settings, container, models, sink):
    """Workflows with no provider credentials"""
    providers = ProviderRegistry(settings, factories=fake_factories(models))
    runner = AgentRunner(container.agents, providers, container.tools, sink)
    return InvestmentWorkflows(container.data_service, container.repository, runner, providers, container.tools)


async def test_real_time_property_data(container):
    listing = make_listing(city="Denver", state="CO", zip_code="80202")
    await container.repository.add_all([listing])

    data = await container.workflows.get_real_time_property_data(listing.id)

    assert data['property']['id'] == listing.id
    assert data['valuation'].property_id == listing.id
    assert data['analysis'].property_id == listing.id
    assert len(data['market_trends']) == 6
    assert data['market_insights'].region == "Denver"


async def test_real_time_property_data_unknown(container):
    with pytest.raises(PropertyNotFound):
        await container.workflows.get_real_time_property_data("missing")


async def test_cma_with_default_parameters(container):
    listing = make_listing()
    await container.repository.add_all([listing])

    cma = await container.workflows.run_cma_analysis(listing.id)

    assert cma['subject_property']['id'] == listing.id


async def test_strategy_from_agent(container, models):
    models["openai"].turns = [ModelTurn(text="Buy duplexes near downtown")]

    result = await container.workflows.generate_investment_strategy(StrategyRequest(region="Austin, TX"))

    assert result['investment_strategy'] == "Buy duplexes near downtown"
    assert len(result['opportunity_zones']) == 3
    assert 'notice' not in result
    assert "Budget: $250,000" in models["openai"].requests[0]['conversation'][0]['content']


async def test_strategy_fallback_on_agent_failure(container, models):
    models["openai"].error = RuntimeError("timeout")

    result = await container.workflows.generate_investment_strategy(
        StrategyRequest(region="Austin, TX", budget=400000)
    )

    assert result['investment_strategy'].startswith("# Investment Strategy for Austin, TX")
    assert "Given your budget of $400,000" in result['investment_strategy']
    assert result['notice'] == STRATEGY_FALLBACK_NOTICE


async def test_strategy_fallback_without_provider(offline, models):
    result = await offline.generate_investment_strategy(StrategyRequest(region="Austin, TX"))

    assert result['notice'] == STRATEGY_FALLBACK_NOTICE
    assert all(not m.requests for m in models.values())


async def test_opportunities_when_agent_fails(container, models):
    models["anthropic"].error = RuntimeError("overloaded")

    result = await container.workflows.get_investment_opportunities("Austin")

    assert len(result['opportunity_zones']) == 3
    assert result['opportunity_analysis'] == OPPORTUNITY_ANALYSIS_UNAVAILABLE


async def test_static_reports_without_provider(offline):
    assert await offline.analyze_market() == MARKET_ANALYSIS_HTML
    assert await offline.predict_market() == MARKET_PREDICTION_HTML
    assert await offline.analyze_deals() == DEAL_ANALYSIS_HTML


async def test_market_report_from_model(container, models):
    models["openai"].turns = [ModelTurn(text="<h2>Rates are falling</h2>")]

    assert await container.workflows.analyze_market() == "<h2>Rates are falling</h2>"
    assert models["openai"].requests[0]['tools'] == []


async def test_static_property_analysis(offline, container):
    listing = make_listing(price=400000, deal_score=8)
    await container.repository.add_all([listing])

    analysis = await offline.property_ai_analysis(listing.id, "investment")

    assert "Cap Rate: 3.6%" in analysis
    assert "Cash on Cash Return (20% down): 18.0%" in analysis
    assert "strong investment opportunity" in analysis


async def test_property_analysis_from_agent(container, models):
    listing = make_listing()
    await container.repository.add_all([listing])
    models["anthropic"].turns = [ModelTurn(text="Great schools nearby")]

    assert await container.workflows.property_ai_analysis(listing.id, "neighborhood") == "Great schools nearby"
