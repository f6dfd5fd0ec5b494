import pytest

from proplens.exceptions import PropertyNotFound, ToolInputError, ToolNotFound

from .conftest import make_listing

pytestmark = pytest.mark.anyio

TOOL_NAMES = [
    "investment-calculator",
    "property-database",
    "real-estate-search",
    "comparative-market-analysis",
    "market-insights",
    "property-investment-analysis",
    "opportunity-zone-analysis",
]


async def test_all_tools_registered(container):
    assert container.tools.names == TOOL_NAMES
    assert [tool.name for tool in container.tools] == TOOL_NAMES
    assert len(container.tools) == 7


async def test_function_schemas_are_flat(container):
    schemas = {s['name']: s for s in container.tools.function_schemas()}

    params = schemas["property-database"]['parameters']
    assert '$defs' not in params
    assert params['properties']['filters']['type'] == 'object'
    assert params['required'] == ['query_type']


async def test_subset_rejects_unknown_tool(container):
    with pytest.raises(ToolNotFound):
        container.tools.subset(["market-insights", "crystal-ball"])


async def test_unknown_tool(container):
    with pytest.raises(ToolNotFound):
        await container.tools.execute("crystal-ball", {})


async def test_unknown_keys_are_rejected(container):
    with pytest.raises(ToolInputError):
        await container.tools.execute("market-insights", {"region": "Austin", "mood": "bullish"})


async def test_missing_required_field(container):
    with pytest.raises(ToolInputError):
        await container.tools.execute("investment-calculator", {"property_price": 100000})


async def test_investment_calculator(container):
    result = await container.tools.execute("investment-calculator", {
        "property_price": 400000, "down_payment": 80000, "interest_rate": 6, "loan_term": 30,
        "calculation_type": "mortgage",
    })

    assert result['monthly_payment'] == "1918.56"


async def test_saved_query_requires_user(container):
    with pytest.raises(ValueError, match="User ID is required"):
        await container.tools.execute("property-database", {"query_type": "saved"})


async def test_deals_ordered_by_score(container):
    await container.repository.add_all([make_listing(deal_score=s) for s in (3, 18, 11)])

    rows = await container.tools.execute("property-database", {
        "query_type": "deals", "filters": {"deal_score": 5},
    })

    assert [r['deal_score'] for r in rows] == [18, 11]


async def test_market_trend_summaries(container):
    result = await container.tools.execute("real-estate-search", {
        "query": "trends", "location": "Boise", "data_type": "market-trends",
    })

    assert len(result['trends']) == 6
    assert result['trends'][0]['title'].startswith("Housing Market Trends in Boise - ")


async def test_property_values_without_listings_are_static(container):
    result = await container.tools.execute("real-estate-search", {
        "query": "values", "data_type": "property-values",
    })

    assert result['valuations'][0]['value'] == "$375,000"


async def test_property_values_from_first_listing(container):
    await container.repository.add_all([make_listing(price=500000)])

    result = await container.tools.execute("real-estate-search", {
        "query": "values", "location": "Austin, TX", "data_type": "property-values",
    })

    assert result['valuations'][0]['value'] == "$510,000"
    assert result['valuations'][1]['value'] == "$475,000 - $540,000"


async def test_neighborhood_info_needs_city_and_state(container):
    parsed = await container.tools.execute("real-estate-search", {
        "query": "schools", "location": "Austin, TX", "data_type": "neighborhood-info",
    })
    unparsed = await container.tools.execute("real-estate-search", {
        "query": "schools", "location": "Austin", "data_type": "neighborhood-info",
    })

    assert parsed['neighborhoods'][0]['walkability'] == "72/100"
    assert parsed['neighborhoods'][0]['median_home_value'] == "$450,000"
    assert unparsed['neighborhoods'][0]['median_home_value'] == "$425,000"


async def test_cma_propagates_missing_property(container):
    with pytest.raises(PropertyNotFound):
        await container.tools.execute("comparative-market-analysis", {"property_id": "missing"})


async def test_market_insights_ratings(container):
    result = await container.tools.execute("market-insights", {"region": "Austin, TX"})

    assert len(result['actionable_insights']) == 4
    assert set(result['forecast']) == {'short_term', 'medium_term', 'long_term'}
    assert result['forecast']['medium_term']['timeframe'] == "1-2 years"


async def test_property_investment_analysis(container):
    listing = make_listing()
    await container.repository.add_all([listing])

    result = await container.tools.execute("property-investment-analysis", {"property_id": listing.id})

    assert result['property_id'] == listing.id
    assert len(result['comparable_properties']) == 3
    assert result['financial_metrics']['estimated_rent'] == "$2,000/month"


async def test_opportunity_zones_sorted_by_score(container):
    result = await container.tools.execute("opportunity-zone-analysis", {"region": "Austin"})

    scores = [z['opportunity_score'] for z in result['opportunity_zones']]
    assert scores == sorted(scores, reverse=True)
    assert result['actionable_insights'][0].startswith("Austin - Eastside has the highest opportunity score (92)")
