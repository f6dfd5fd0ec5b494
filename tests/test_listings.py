import pytest

from proplens.data_sources.models import PropertySearchParams
from proplens.database.repository import parse_location

from .conftest import make_listing

pytestmark = pytest.mark.anyio


def test_parse_location():
    assert parse_location("Austin, TX") == {'city': 'Austin', 'state': 'TX', 'term': None}
    assert parse_location(" 78701 ") == {'city': None, 'state': None, 'term': '78701'}


async def test_city_state_search_over_sample_data(container, seeded):
    expected = [l for l in seeded if l.city == "Austin" and l.state == "TX"]

    results = await container.data_service.fetch_property_listings(PropertySearchParams(location="Austin, TX"))

    assert len(results) == min(10, len(expected))
    assert all(r.city == "Austin" and r.state == "TX" for r in results)
    assert all(r.source == "internal" for r in results)


async def test_filters_are_inclusive_minimums(container):
    await container.repository.add_all([
        make_listing(price=300000, bedrooms=2, bathrooms=1),
        make_listing(price=350000, bedrooms=3, bathrooms=2),
        make_listing(price=400000, bedrooms=4, bathrooms=3),
        make_listing(price=450000, bedrooms=5, bathrooms=3, property_type="condo"),
    ])

    results = await container.data_service.fetch_property_listings(PropertySearchParams(
        location="austin, tx", min_price=350000, max_price=450000, bedrooms=3, bathrooms=2,
        property_type="residential",
    ))

    assert sorted(r.price for r in results) == [350000, 400000]


async def test_single_term_matches_zip(container):
    await container.repository.add_all([make_listing(zip_code="78704"), make_listing(city="Denver", state="CO")])

    results = await container.data_service.fetch_property_listings(PropertySearchParams(location="78704"))

    assert [r.zip_code for r in results] == ["78704"]


async def test_limit_is_respected(container, seeded):
    results = await container.data_service.fetch_property_listings(PropertySearchParams(limit=5))

    assert len(results) == 5


async def test_toggle_saved_listing(container):
    listing = make_listing()
    await container.repository.add_all([listing])

    assert await container.repository.toggle_saved_listing("user-1", listing.id) is True
    saved = await container.repository.saved_listings("user-1")
    assert [s.listing.id for s in saved] == [listing.id]

    assert await container.repository.toggle_saved_listing("user-1", listing.id) is False
    assert await container.repository.saved_listings("user-1") == []


async def test_austin_price_band_over_fifty_listings(container, seeded):
    expected = [
        l for l in seeded
        if l.city.lower() == "austin" and l.state.lower() == "tx" and 300000 <= l.price <= 500000
    ]

    results = await container.data_service.fetch_property_listings(PropertySearchParams(
        location="Austin, TX", min_price=300000, max_price=500000, limit=5,
    ))

    assert len(seeded) == 50
    assert len(results) == min(5, len(expected))
    assert all(300000 <= r.price <= 500000 for r in results)
    assert all(r.city.lower() == "austin" and r.state.lower() == "tx" for r in results)
    assert all(r.source == "internal" for r in results)


async def test_repeated_search_queries_database_once(container, seeded, monkeypatch):
    calls = []
    search_listings = container.repository.search_listings

    async def counting_search(**kwargs):
        calls.append(kwargs)
        return await search_listings(**kwargs)

    monkeypatch.setattr(container.repository, "search_listings", counting_search)
    params = PropertySearchParams(location="Austin, TX", min_price=300000, max_price=500000, limit=5)

    first = await container.data_service.fetch_property_listings(params)
    second = await container.data_service.fetch_property_listings(params)

    assert first == second
    assert len(calls) == 1
