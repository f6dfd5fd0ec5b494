"""
Synthetic data generator.

Last resort of every aggregation chain so the dashboard always has
something to render in demo/offline mode. Values are NOT statistically
meaningful. Randomness comes from a generator seeded by the caller
(the aggregation layer keys it by the query) so equal inputs yield equal
outputs.
"""

import random
from datetime import date, datetime, timezone
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from .models import (
    ComparableProperty,
    FinancialMetrics,
    ForecastPoint,
    HistoricalValue,
    InsightMetrics,
    MarketForecast,
    MarketInsight,
    MarketTrend,
    NeighborhoodInfo,
    OpportunityZone,
    PropertyAnalysis,
    PropertyValuation,
    School,
    ValuationRange,
    ZoneMetrics,
)

HISTORY_MONTHS = 12

DEFAULT_SCHOOLS = [
    School(name="Washington Elementary", type="Public", grades="K-5", rating=8.5, distance=0.8),
    School(name="Lincoln Middle School", type="Public", grades="6-8", rating=7.9, distance=1.2),
    School(name="Roosevelt High School", type="Public", grades="9-12", rating=8.2, distance=1.5),
]


def property_valuation(
    property_id: str,
    base_price: float,
    rng: random.Random,
    today: Optional[date] = None
) -> PropertyValuation:
    """
    Valuation around a base price: current month plus 12 trailing months.

    Each point applies a +/-2% fluctuation on top of ~5% annual growth.
    """
    today = today or date.today()
    historical_values = []
    for months_back in range(HISTORY_MONTHS, -1, -1):
        point_date = today - relativedelta(months=months_back)
        fluctuation = 1 + rng.uniform(-2, 2) / 100
        growth_factor = 1 + ((5 / 12) * (HISTORY_MONTHS - months_back)) / 100
        historical_values.append(HistoricalValue(
            date=point_date.isoformat(),
            value=round(base_price * fluctuation * growth_factor),
        ))

    return PropertyValuation(
        property_id=property_id,
        estimated_value=round(base_price * 1.02),
        valuation_range=ValuationRange(low=round(base_price * 0.95), high=round(base_price * 1.08)),
        last_updated=datetime.now(timezone.utc).isoformat(),
        historical_values=historical_values,
        source="synthetic",
    )


def market_trends(
    region: str,
    region_type: str,
    rng: random.Random,
    months: int = HISTORY_MONTHS,
    today: Optional[date] = None
) -> List[MarketTrend]:
    """Monthly series, newest first, drifting from a random starting median."""
    today = today or date.today()
    median_price = rng.uniform(300_000, 550_000)
    inventory = rng.randint(150, 600)
    trends = []
    for months_back in range(months):
        point = today - relativedelta(months=months_back)
        change_pct = round(rng.uniform(-1.0, 2.5), 2)
        trends.append(MarketTrend(
            region=region,
            region_type=region_type,
            median_price=round(median_price),
            price_change_pct=change_pct,
            avg_days_on_market=rng.randint(12, 45),
            inventory_count=max(0, inventory + rng.randint(-40, 40)),
            month=point.month,
            year=point.year,
            source="synthetic",
        ))
        # walking backwards in time: undo this month's change
        median_price = median_price / (1 + change_pct / 100)
    return trends


def neighborhood_info() -> NeighborhoodInfo:
    return NeighborhoodInfo(schools=list(DEFAULT_SCHOOLS), source="synthetic")


def market_insight(region: str, region_type: Optional[str], rng: random.Random, today: Optional[date] = None) -> MarketInsight:
    today = today or date.today()
    median_price = round(rng.uniform(380_000, 520_000), -3)
    median_rent = round(rng.uniform(1_900, 2_600), -1)
    return MarketInsight(
        region=region,
        region_type=region_type or "city",
        period=f"{today.month}/{today.year}",
        metrics=InsightMetrics(
            median_price=median_price,
            price_change_pct=round(rng.uniform(1.5, 5.5), 1),
            avg_days_on_market=rng.randint(15, 35),
            inventory_count=rng.randint(200, 500),
            sales_volume=rng.randint(80, 160),
            median_rent_price=median_rent,
            rent_yield=round(median_rent * 12 / median_price * 100, 1),
            price_to_rent_ratio=round(median_price / (median_rent * 12), 1),
            affordability_index=rng.randint(40, 80),
            market_heat_index=rng.randint(50, 85),
        ),
        forecast=MarketForecast(
            short_term=ForecastPoint(price_change_pct=round(rng.uniform(0.5, 2.0), 1), confidence=85),
            medium_term=ForecastPoint(price_change_pct=round(rng.uniform(2.0, 5.0), 1), confidence=75),
            long_term=ForecastPoint(price_change_pct=round(rng.uniform(8.0, 15.0), 1), confidence=65),
        ),
        source="synthetic",
    )


def property_analysis(
    property_id: str,
    address: str,
    price: float,
    square_feet: int,
    bedrooms: int,
    bathrooms: float,
    year_built: int,
    rng: random.Random
) -> PropertyAnalysis:
    """Scored analysis with three comparables derived from the subject listing."""
    words = address.split()
    street = words[1] if len(words) > 1 else "Main"

    def comp(comp_id, suffix, price_factor, sqft_delta, bed_delta, bath_delta, year_delta, distance, similarity):
        comp_price = round(price * price_factor)
        comp_sqft = max(1, square_feet + sqft_delta)
        return ComparableProperty(
            id=comp_id,
            address=f"{rng.randint(1, 9999)} {street} {suffix}",
            price=comp_price,
            price_per_sq_ft=round(comp_price / comp_sqft),
            bedrooms=bedrooms + bed_delta,
            bathrooms=bathrooms + bath_delta,
            square_feet=comp_sqft,
            year_built=year_built + year_delta,
            distance=distance,
            similarity=similarity,
        )

    estimated_rent = round(price * 0.005)
    return PropertyAnalysis(
        property_id=property_id,
        valuation_score=rng.randint(70, 99),
        investment_score=rng.randint(70, 99),
        rental_score=rng.randint(70, 99),
        appreciation_score=rng.randint(70, 99),
        cash_flow_score=rng.randint(70, 99),
        risk_score=rng.randint(50, 79),
        overall_score=rng.randint(75, 94),
        insights=[
            "Property is priced below market value by approximately 5-8%",
            "Location shows strong appreciation potential over the next 5 years",
            "Rental demand in this area is consistently high with low vacancy rates",
            "Property features align well with current market preferences",
            "Recent infrastructure improvements nearby are likely to increase property value",
        ],
        recommendations=[
            "Consider making an offer at or slightly below asking price",
            "Rental strategy would yield positive cash flow with current market rates",
            "Minor cosmetic upgrades could significantly increase rental income",
            "Hold for at least 5 years to maximize appreciation potential",
            "Consider refinancing options after 2 years to improve cash flow",
        ],
        comparable_properties=[
            comp("comp1", "St", 0.95, -100, 0, 0, -2, 0.3, 92),
            comp("comp2", "Ave", 1.05, 150, 0, 0.5, 3, 0.5, 88),
            comp("comp3", "Dr", 1.02, 50, 1, 0, -1, 0.7, 85),
        ],
        financial_metrics=FinancialMetrics(
            estimated_value=round(price * 1.05),
            estimated_rent=estimated_rent,
            cap_rate=5.8,
            cash_on_cash_return=8.2,
            gross_rent_multiplier=16.5,
            net_operating_income=round(estimated_rent * 12 * 0.7),
            operating_expense_ratio=0.3,
            debt_service_coverage_ratio=1.5,
            break_even_ratio=0.85,
        ),
        source="synthetic",
    )


def opportunity_zones(region: str, region_type: Optional[str]) -> List[OpportunityZone]:
    zone_type = region_type or "neighborhood"
    return [
        OpportunityZone(
            region=f"{region} - Downtown",
            region_type=zone_type,
            opportunity_score=85,
            metrics=ZoneMetrics(
                median_price=380000, price_change_pct=4.2, avg_days_on_market=18, inventory_count=45,
                rental_demand=88, job_growth=3.5, population_growth=2.8, income_growth=3.2,
                new_development=12, investor_activity=75,
            ),
            insights=[
                "Area is experiencing rapid gentrification with new businesses opening",
                "Public transportation improvements planned for next year",
                "Strong rental demand from young professionals",
                "Low inventory creating competitive buying environment",
                "Multiple mixed-use developments in planning stages",
            ],
            recommended_property_types=["Multi-family", "Condos", "Mixed-use"],
            risk_factors=["Potential for property tax increases", "Some areas still in early stages of revitalization"],
            source="synthetic",
        ),
        OpportunityZone(
            region=f"{region} - Westside",
            region_type=zone_type,
            opportunity_score=78,
            metrics=ZoneMetrics(
                median_price=420000, price_change_pct=3.8, avg_days_on_market=22, inventory_count=65,
                rental_demand=82, job_growth=2.9, population_growth=2.2, income_growth=3.5,
                new_development=8, investor_activity=68,
            ),
            insights=[
                "Established neighborhood with strong school district",
                "New commercial corridor developing along main avenue",
                "Steady appreciation with minimal volatility",
                "Strong rental market for single-family homes",
                "Aging housing stock creating renovation opportunities",
            ],
            recommended_property_types=["Single-family", "Townhomes", "Small multi-family"],
            risk_factors=["Higher entry prices", "Some infrastructure needs updating"],
            source="synthetic",
        ),
        OpportunityZone(
            region=f"{region} - Eastside",
            region_type=zone_type,
            opportunity_score=92,
            metrics=ZoneMetrics(
                median_price=310000, price_change_pct=5.5, avg_days_on_market=15, inventory_count=32,
                rental_demand=92, job_growth=4.2, population_growth=3.5, income_growth=3.8,
                new_development=18, investor_activity=85,
            ),
            insights=[
                "Rapidly developing area with significant public investment",
                "New tech campus bringing high-paying jobs to the area",
                "Multiple new apartment complexes under construction",
                "Excellent price-to-rent ratios for investors",
                "Strong potential for appreciation over next 5 years",
            ],
            recommended_property_types=["Multi-family", "New construction", "Fix-and-flip opportunities"],
            risk_factors=["Rapid changes may lead to market volatility", "Some areas still have higher crime rates"],
            source="synthetic",
        ),
    ]
