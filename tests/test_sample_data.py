import random

import pytest

from proplens.database.sample_data import (
    CITIES,
    deal_reasons,
    generate_listings,
    seed_sample_data,
)
from proplens.providers.schema import sanitize_schema
from proplens.agent.tools import PropertyDatabaseInput


def test_deal_reasons_follow_score():
    assert deal_reasons(3) == []
    assert len(deal_reasons(12)) == 2
    assert len(deal_reasons(19)) == 3


def test_listings_are_reproducible():
    first = generate_listings(5, random.Random(42))
    second = generate_listings(5, random.Random(42))

    assert [(l.address, l.price) for l in first] == [(l.address, l.price) for l in second]
    assert all((l.city, l.state) in CITIES for l in first)
    assert all(200000 <= l.price < 1500000 for l in first)


@pytest.mark.anyio
async def test_seed_inserts_rows(container):
    counts = await seed_sample_data(container.repository, listings=12, trends=4, seed=1)

    assert counts == {'listings': 12, 'market_trends': 4}
    assert len(await container.repository.search_listings(limit=50)) == 12


def test_sanitized_schema_inlines_nested_models():
    schema = sanitize_schema(PropertyDatabaseInput.model_json_schema())

    filters = schema['properties']['filters']
    assert 'anyOf' not in filters
    assert 'title' not in filters
    assert filters['properties']['user_id']['type'] == 'string'
