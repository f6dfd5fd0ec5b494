"""
Record shapes returned by the data aggregation layer.

Every record carries a `source` tag naming where it came from:
an external provider, the local database ("internal") or the synthetic
generator.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

DataSourceName = Literal["repliers", "redfin", "zillow", "mls", "internal", "synthetic"]
RegionType = Literal["city", "zip", "state", "neighborhood"]


class PropertySearchParams(BaseModel):
    """Filters for a listing search"""
    location: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    property_type: Optional[str] = None
    limit: int = Field(default=10, ge=1, le=100)


class PropertyDetails(BaseModel):
    id: str
    address: str
    city: str
    state: str
    zip_code: str
    price: float
    bedrooms: int
    bathrooms: float
    square_feet: int
    year_built: int
    property_type: str
    listing_status: str
    description: str = ""
    features: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    days_on_market: int = 0
    listing_date: str = ""
    deal_score: Optional[float] = None
    source: DataSourceName


class ValuationRange(BaseModel):
    low: float
    high: float


class HistoricalValue(BaseModel):
    date: str
    value: float


class PropertyValuation(BaseModel):
    property_id: str
    estimated_value: float
    valuation_range: ValuationRange
    last_updated: str
    historical_values: List[HistoricalValue] = Field(default_factory=list)
    source: DataSourceName


class MarketTrend(BaseModel):
    region: str
    region_type: str
    median_price: float
    price_change_pct: float
    avg_days_on_market: float
    inventory_count: int
    month: int
    year: int
    source: DataSourceName


# ============================================================================
# NEIGHBORHOOD
# ============================================================================

class NeighborhoodOverview(BaseModel):
    population: int = 45000
    median_income: float = 85000
    median_home_value: float = 450000
    cost_of_living_index: float = 110  # 100 is national average


class School(BaseModel):
    name: str = ""
    type: str = ""
    grades: str = ""
    rating: float = 0
    distance: float = 0


class Amenities(BaseModel):
    restaurants: int = 42
    grocery_stores: int = 8
    parks: int = 5
    gyms: int = 6
    hospitals: int = 2


class Transportation(BaseModel):
    walk_score: int = 72
    transit_score: int = 65
    bike_score: int = 68
    average_commute: int = 28  # minutes


class CrimeRate(BaseModel):
    overall: str = "Low"
    violent: str = "Very Low"
    property: str = "Low"
    compared_to_national: str = "-15%"


class NeighborhoodMarket(BaseModel):
    home_value_trend: str = "+4.2% YoY"
    forecast_next_year: str = "+3.8%"
    average_days_on_market: int = 18
    median_rent: float = 2200


class NeighborhoodInfo(BaseModel):
    overview: NeighborhoodOverview = Field(default_factory=NeighborhoodOverview)
    schools: List[School] = Field(default_factory=list)
    amenities: Amenities = Field(default_factory=Amenities)
    transportation: Transportation = Field(default_factory=Transportation)
    crime_rate: CrimeRate = Field(default_factory=CrimeRate)
    market_trends: NeighborhoodMarket = Field(default_factory=NeighborhoodMarket)
    source: DataSourceName


# ============================================================================
# MARKET INSIGHTS
# ============================================================================

class InsightMetrics(BaseModel):
    median_price: float
    price_change_pct: float
    avg_days_on_market: float
    inventory_count: int
    sales_volume: int
    median_rent_price: Optional[float] = None
    rent_yield: Optional[float] = None
    price_to_rent_ratio: Optional[float] = None
    affordability_index: Optional[float] = None
    market_heat_index: Optional[float] = None


class ForecastPoint(BaseModel):
    price_change_pct: float
    confidence: float


class MarketForecast(BaseModel):
    short_term: ForecastPoint
    medium_term: ForecastPoint
    long_term: ForecastPoint


class MarketInsight(BaseModel):
    region: str
    region_type: str
    period: str
    metrics: InsightMetrics
    forecast: MarketForecast
    source: DataSourceName


# ============================================================================
# PROPERTY ANALYSIS
# ============================================================================

class ComparableProperty(BaseModel):
    id: str
    address: str
    price: float
    price_per_sq_ft: float
    bedrooms: int
    bathrooms: float
    square_feet: int
    year_built: int
    distance: float
    similarity: float


class FinancialMetrics(BaseModel):
    estimated_value: float
    estimated_rent: float
    cap_rate: float
    cash_on_cash_return: float
    gross_rent_multiplier: float
    net_operating_income: float
    operating_expense_ratio: float
    debt_service_coverage_ratio: float
    break_even_ratio: float


class PropertyAnalysis(BaseModel):
    property_id: str
    valuation_score: int
    investment_score: int
    rental_score: int
    appreciation_score: int
    cash_flow_score: int
    risk_score: int
    overall_score: int
    insights: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    comparable_properties: List[ComparableProperty] = Field(default_factory=list)
    financial_metrics: FinancialMetrics
    source: DataSourceName


# ============================================================================
# OPPORTUNITY ZONES
# ============================================================================

class ZoneMetrics(BaseModel):
    median_price: float
    price_change_pct: float
    avg_days_on_market: float
    inventory_count: int
    rental_demand: float
    job_growth: float
    population_growth: float
    income_growth: float
    new_development: int
    investor_activity: float


class OpportunityZone(BaseModel):
    region: str
    region_type: str
    opportunity_score: float
    metrics: ZoneMetrics
    insights: List[str] = Field(default_factory=list)
    recommended_property_types: List[str] = Field(default_factory=list)
    risk_factors: List[str] = Field(default_factory=list)
    source: DataSourceName
