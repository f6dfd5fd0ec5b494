import pytest

from proplens.data_sources.base import INSIGHTS, SEARCH, TRENDS
from proplens.data_sources.models import MarketTrend, PropertySearchParams
from proplens.database import ListingRepository
from proplens.database.models import MarketTrend as MarketTrendRow
from proplens.exceptions import PropertyNotFound, UpstreamError
from proplens.services import RealEstateDataService, ResponseCache

from .conftest import FakeSource, make_listing

pytestmark = pytest.mark.anyio


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def trend(source: str) -> MarketTrend:
    return MarketTrend(
        region="Austin", region_type="city", median_price=450000, price_change_pct=1.5,
        avg_days_on_market=20, inventory_count=300, month=5, year=2024, source=source,
    )


def make_service(settings, db, sources=(), cache=None, real_apis=True):
    settings = settings.model_copy(update={"USE_REAL_APIS": real_apis})
    return RealEstateDataService(settings, ListingRepository(db), cache if cache is not None else ResponseCache(), sources)


async def test_synthetic_trends_when_external_sources_disabled(settings, db):
    repliers = FakeSource("repliers", {TRENDS}, {"get_market_trends": [trend("repliers")]})
    service = make_service(settings, db, [repliers], real_apis=False)

    trends = await service.fetch_market_trends(region="Boise")

    assert len(trends) == 12
    assert {t.source for t in trends} == {"synthetic"}
    assert repliers.calls == {}


async def test_failing_source_falls_through_to_next(settings, db):
    repliers = FakeSource("repliers", {TRENDS}, {"get_market_trends": UpstreamError("repliers", "boom", 503)})
    redfin = FakeSource("redfin", {TRENDS}, {"get_market_trends": [trend("redfin")]})
    service = make_service(settings, db, [repliers, redfin])

    trends = await service.fetch_market_trends(region="Austin")

    assert [t.source for t in trends] == ["redfin"]
    assert repliers.calls["get_market_trends"] == 1


async def test_empty_result_falls_through_to_next(settings, db):
    repliers = FakeSource("repliers", {TRENDS}, {"get_market_trends": []})
    redfin = FakeSource("redfin", {TRENDS}, {"get_market_trends": [trend("redfin")]})
    service = make_service(settings, db, [repliers, redfin])

    trends = await service.fetch_market_trends(region="Austin")

    assert trends[0].source == "redfin"


async def test_source_without_credential_is_skipped(settings, db):
    repliers = FakeSource("repliers", {TRENDS}, {"get_market_trends": [trend("repliers")]}, api_key="")
    service = make_service(settings, db, [repliers])

    trends = await service.fetch_market_trends(region="Austin")

    assert repliers.calls == {}
    assert trends[0].source == "synthetic"


async def test_sources_without_capability_are_skipped(settings, db):
    mls = FakeSource("mls", {SEARCH}, {"get_market_trends": [trend("mls")]})
    service = make_service(settings, db, [mls])

    await service.fetch_market_trends(region="Austin")

    assert mls.calls == {}


async def test_second_call_is_served_from_cache(settings, db):
    redfin = FakeSource("redfin", {TRENDS}, {"get_market_trends": [trend("redfin")]})
    service = make_service(settings, db, [redfin])

    first = await service.fetch_market_trends(region="Austin")
    second = await service.fetch_market_trends(region="Austin")

    assert first == second
    assert redfin.calls["get_market_trends"] == 1


async def test_expired_entry_is_refetched(settings, db):
    clock = Clock()
    redfin = FakeSource("redfin", {TRENDS}, {"get_market_trends": [trend("redfin")]})
    service = make_service(settings, db, [redfin], cache=ResponseCache(ttl_seconds=900, clock=clock))

    await service.fetch_market_trends(region="Austin")
    clock.now += 901
    await service.fetch_market_trends(region="Austin")

    assert redfin.calls["get_market_trends"] == 2


async def test_disabled_cache_always_refetches(settings, db):
    redfin = FakeSource("redfin", {TRENDS}, {"get_market_trends": [trend("redfin")]})
    service = make_service(settings, db, [redfin], cache=ResponseCache(enabled=False))

    await service.fetch_market_trends(region="Austin")
    await service.fetch_market_trends(region="Austin")

    assert redfin.calls["get_market_trends"] == 2


async def test_trends_from_database_before_synthetic(settings, db):
    repository = ListingRepository(db)
    await repository.add_all([
        MarketTrendRow(region="Denver", region_type="city", median_price=520000, price_change_pct=2.0,
                       avg_days_on_market=25, inventory_count=210, month=m, year=2024)
        for m in (1, 2, 3)
    ])
    service = make_service(settings, db, real_apis=False)

    trends = await service.fetch_market_trends(region="Denver")

    assert len(trends) == 3
    assert {t.source for t in trends} == {"internal"}


async def test_insights_fall_back_to_synthetic_when_repliers_fails(settings, db):
    repliers = FakeSource("repliers", {INSIGHTS}, {"get_market_insights": UpstreamError("repliers", "down")})
    service = make_service(settings, db, [repliers])

    insights = await service.get_market_insights("Austin, TX")

    assert insights.source == "synthetic"
    assert insights.region == "Austin, TX"


async def test_listing_search_uses_database_as_terminal_tier(settings, db):
    repliers = FakeSource("repliers", {SEARCH}, {"search_properties": UpstreamError("repliers", "down")})
    await ListingRepository(db).add_all([make_listing(), make_listing(city="Denver", state="CO")])
    service = make_service(settings, db, [repliers])

    listings = await service.fetch_property_listings(PropertySearchParams(location="Austin, TX"))
    nothing = await service.fetch_property_listings(PropertySearchParams(location="Nowhere, ZZ"))

    assert [l.city for l in listings] == ["Austin"]
    assert listings[0].source == "internal"
    assert nothing == []


async def test_synthetic_valuation_shape(settings, db):
    listing = make_listing(price=400000)
    await ListingRepository(db).add_all([listing])
    service = make_service(settings, db, real_apis=False)

    valuation = await service.get_property_valuation(listing.id)

    assert valuation.estimated_value == 408000
    assert valuation.valuation_range.low == 380000
    assert valuation.valuation_range.high == 432000
    assert len(valuation.historical_values) == 13
    assert valuation.source == "synthetic"
    assert valuation.last_updated.endswith("+00:00")
    assert listing.created_at.tzinfo is not None


async def test_valuation_is_reproducible_across_services(settings, db):
    listing = make_listing()
    await ListingRepository(db).add_all([listing])

    first = await make_service(settings, db, real_apis=False).get_property_valuation(listing.id)
    second = await make_service(settings, db, real_apis=False).get_property_valuation(listing.id)

    assert [p.value for p in first.historical_values] == [p.value for p in second.historical_values]


async def test_valuation_of_unknown_property(settings, db):
    service = make_service(settings, db, real_apis=False)

    with pytest.raises(PropertyNotFound):
        await service.get_property_valuation("missing")

    valuation = await service.get_property_valuation("external-1", base_price=300000)
    assert valuation.estimated_value == 306000


async def test_analysis_of_unknown_property(settings, db):
    service = make_service(settings, db, real_apis=False)

    with pytest.raises(PropertyNotFound):
        await service.get_property_analysis("missing")


async def test_neighborhood_defaults(settings, db):
    service = make_service(settings, db, real_apis=False)

    info = await service.get_neighborhood_info("Austin", "TX")

    assert info.overview.median_home_value == 450000
    assert info.transportation.walk_score == 72
    assert len(info.schools) == 3


async def test_three_opportunity_zones(settings, db):
    service = make_service(settings, db, real_apis=False)

    zones = await service.get_opportunity_zones("Austin")

    assert [z.region for z in zones] == ["Austin - Downtown", "Austin - Westside", "Austin - Eastside"]


async def test_valuation_lookup_outage_is_not_reported_as_missing(settings, db, monkeypatch):
    service = make_service(settings, db, real_apis=False)

    async def unavailable(property_id):
        raise ConnectionError("database unavailable")

    monkeypatch.setattr(service.repository, "get_listing", unavailable)

    with pytest.raises(ConnectionError):
        await service.get_property_valuation("listing-1")

    valuation = await service.get_property_valuation("listing-1", base_price=300000)
    assert valuation.estimated_value == 306000
