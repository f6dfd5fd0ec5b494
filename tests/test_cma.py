import pytest

from proplens.exceptions import PropertyNotFound
from proplens.intelligence.analyzers import ComparableSalesAnalyzer
from proplens.intelligence.analyzers.comparable_sales_analyzer import (
    FAIRLY_PRICED,
    INSUFFICIENT_DATA,
    MISSING_SQUARE_FOOTAGE,
    OVERVALUED,
    UNDERVALUED,
    classify_price_difference,
)

from .conftest import make_listing

pytestmark = pytest.mark.anyio


def test_threshold_boundaries_are_inclusive():
    assert classify_price_difference(-5.0) == UNDERVALUED
    assert classify_price_difference(-4.99) == FAIRLY_PRICED
    assert classify_price_difference(4.99) == FAIRLY_PRICED
    assert classify_price_difference(5.0) == OVERVALUED


async def analyze(container, subject_price, comps=2, max_comps=5):
    subject = make_listing(price=subject_price, address="1 Subject Way")
    rows = [subject] + [make_listing(price=400000, address=f"{n} Comp St") for n in range(comps)]
    await container.repository.add_all(rows)
    analyzer = ComparableSalesAnalyzer(container.repository, container.data_service)
    return subject, await analyzer.analyze_comps(subject.id, max_comps=max_comps)


async def test_five_percent_below_estimate_is_undervalued(container):
    subject, cma = await analyze(container, 380000)

    analysis = cma['analysis']
    assert analysis['estimated_value_by_sqft'] == 400000
    assert analysis['price_difference'] == -20000
    assert analysis['price_difference_percent'] == -5.0
    assert analysis['conclusion'] == UNDERVALUED


async def test_five_percent_above_estimate_is_overvalued(container):
    subject, cma = await analyze(container, 420000)

    assert cma['analysis']['price_difference_percent'] == 5.0
    assert cma['analysis']['conclusion'] == OVERVALUED


async def test_small_difference_is_fairly_priced(container):
    subject, cma = await analyze(container, 410000)

    assert cma['analysis']['conclusion'] == FAIRLY_PRICED


async def test_subject_is_excluded_and_comps_truncated(container):
    subject, cma = await analyze(container, 400000, comps=6, max_comps=3)

    ids = [c['id'] for c in cma['comparable_properties']]
    assert len(ids) == 3
    assert subject.id not in ids
    assert cma['subject_property']['id'] == subject.id
    assert cma['comparable_properties'][0]['price_per_sqft'] == 200


async def test_no_comparables(container):
    subject, cma = await analyze(container, 400000, comps=0)

    assert cma['comparable_properties'] == []
    assert cma['analysis']['comps_found'] == 0
    assert cma['analysis']['conclusion'] == INSUFFICIENT_DATA


async def test_unknown_subject(container):
    analyzer = ComparableSalesAnalyzer(container.repository, container.data_service)

    with pytest.raises(PropertyNotFound):
        await analyzer.analyze_comps("missing")


async def test_rounding_does_not_move_the_boundary(container):
    subject, cma = await analyze(container, 380016)

    assert cma['analysis']['price_difference_percent'] == -5.0
    assert cma['analysis']['conclusion'] == FAIRLY_PRICED


async def test_rounding_does_not_move_the_upper_boundary(container):
    subject, cma = await analyze(container, 419984)

    assert cma['analysis']['price_difference_percent'] == 5.0
    assert cma['analysis']['conclusion'] == FAIRLY_PRICED


async def test_just_past_the_boundary(container):
    subject, cma = await analyze(container, 379984)

    assert cma['analysis']['conclusion'] == UNDERVALUED


async def test_comps_without_square_footage_are_left_out(container):
    subject = make_listing(price=400000, address="1 Subject Way")
    unsized = make_listing(price=400000, address="9 Unknown Ln", square_feet=0)
    await container.repository.add_all([subject, unsized, make_listing(price=400000, address="2 Comp St")])
    analyzer = ComparableSalesAnalyzer(container.repository, container.data_service)

    cma = await analyzer.analyze_comps(subject.id)

    analysis = cma['analysis']
    assert analysis['comps_found'] == 2
    assert analysis['avg_price_per_sqft'] == 200
    assert analysis['estimated_value_by_sqft'] == 400000
    assert analysis['conclusion'] == FAIRLY_PRICED


async def test_subject_without_square_footage(container):
    subject = make_listing(price=400000, address="1 Subject Way", square_feet=0)
    await container.repository.add_all([subject, make_listing(price=400000, address="2 Comp St")])
    analyzer = ComparableSalesAnalyzer(container.repository, container.data_service)

    cma = await analyzer.analyze_comps(subject.id)

    assert cma['subject_property']['price_per_sqft'] is None
    assert cma['analysis']['estimated_value_by_sqft'] is None
    assert cma['analysis']['conclusion'] == MISSING_SQUARE_FOOTAGE
