"""
Agent Tool Definitions

Seven schema-validated tools the agents can call through function calling.
Every tool validates its raw input against a pydantic model (unknown keys
rejected) before the handler runs. Handlers raise on failure; the model
handle feeds the error back to the model as a tool result.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, Iterator, List, Literal, Optional, Type

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..data_sources.models import PropertySearchParams
from ..database.repository import ListingRepository, parse_location
from ..exceptions import ToolInputError, ToolNotFound
from ..intelligence.analyzers import ComparableSalesAnalyzer, calculate_investment_metrics
from ..providers.schema import sanitize_schema
from ..services.aggregation import RealEstateDataService

logger = structlog.get_logger(__name__)

RegionTypeName = Literal["city", "zip", "state", "neighborhood"]


def money(value: float) -> str:
    return f"${value:,.0f}"


def row_to_dict(row) -> Dict[str, Any]:
    return {column.name: getattr(row, column.name) for column in row.__table__.columns}


# ============================================================================
# TOOL INPUT SCHEMAS
# ============================================================================

class ToolInput(BaseModel):
    model_config = ConfigDict(extra="forbid")


class InvestmentCalculatorInput(ToolInput):
    property_price: float = Field(..., gt=0, description="The purchase price of the property")
    down_payment: float = Field(..., ge=0, description="The down payment amount")
    interest_rate: float = Field(..., ge=0, description="The annual interest rate as a percentage")
    loan_term: int = Field(..., gt=0, description="The loan term in years")
    monthly_rent: Optional[float] = Field(None, description="The expected monthly rental income")
    monthly_expenses: Optional[float] = Field(None, description="The expected monthly expenses")
    appreciation_rate: Optional[float] = Field(None, description="The expected annual appreciation rate as a percentage")
    calculation_type: Literal["mortgage", "roi", "cashflow", "caprate", "all"] = Field(
        ..., description="The type of calculation to perform"
    )


class PropertyDatabaseFilters(ToolInput):
    location: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    property_type: Optional[str] = None
    deal_score: Optional[float] = Field(None, description="Minimum deal score for deals queries")
    user_id: Optional[str] = Field(None, description="Required for saved queries")
    limit: Optional[int] = Field(None, ge=1, le=100)


class PropertyDatabaseInput(ToolInput):
    query_type: Literal["property", "market-trends", "deals", "saved"]
    filters: Optional[PropertyDatabaseFilters] = None


class RealEstateSearchInput(ToolInput):
    query: str = Field(..., description="The search query for real estate market data")
    location: Optional[str] = Field(None, description="The location to search for (city, state, zip)")
    data_type: Literal["market-trends", "property-values", "investment-opportunities", "neighborhood-info"] = Field(
        ..., description="The type of data to search for"
    )


class ComparativeMarketAnalysisInput(ToolInput):
    property_id: str = Field(..., description="The ID of the property to analyze")
    radius: float = Field(1, gt=0, description="The radius in miles to search for comparable properties")
    max_comps: int = Field(5, ge=1, le=50, description="The maximum number of comparable properties to return")


class RegionInput(ToolInput):
    region: str = Field(..., description="The region to analyze (city, state, or zip code)")
    region_type: Optional[RegionTypeName] = Field(None, description="The type of region being analyzed")


class PropertyInvestmentAnalysisInput(ToolInput):
    property_id: str = Field(..., description="The ID of the property to analyze")


# ============================================================================
# TOOL SET
# ============================================================================

@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    input_model: Type[ToolInput]
    handler: Callable[[Any], Awaitable[Any]]

    def validate(self, raw: Optional[Dict[str, Any]]) -> ToolInput:
        try:
            return self.input_model.model_validate(raw or {})
        except ValidationError as e:
            raise ToolInputError(self.name, str(e)) from e

    async def execute(self, raw: Optional[Dict[str, Any]]) -> Any:
        return await self.handler(self.validate(raw))

    def function_schema(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": sanitize_schema(self.input_model.model_json_schema()),
        }


class ToolSet:
    """
    Immutable collection of tools keyed by name

    Usage:
        tools = build_tool_set(data_service, repository)
        agent_tools = tools.subset(["market-insights", "investment-calculator"])
        result = await agent_tools.execute("market-insights", {"region": "Austin, TX"})
    """

    def __init__(self, tools: Iterable[ToolDefinition]):
        self._tools: Dict[str, ToolDefinition] = {tool.name: tool for tool in tools}

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    @property
    def names(self) -> List[str]:
        return list(self._tools)

    def get(self, name: str) -> ToolDefinition:
        if name not in self._tools:
            raise ToolNotFound(f"Unknown tool: {name}")
        return self._tools[name]

    def subset(self, names: Iterable[str]) -> "ToolSet":
        return ToolSet(self.get(name) for name in names)

    async def execute(self, name: str, raw: Optional[Dict[str, Any]]) -> Any:
        """
        Raises:
            ToolNotFound: name is not in this set
            ToolInputError: raw input fails the tool's schema
        """
        return await self.get(name).execute(raw)

    def function_schemas(self) -> List[Dict[str, Any]]:
        return [tool.function_schema() for tool in self]


# ============================================================================
# HANDLERS
# ============================================================================

class RealEstateTools:
    """Tool handlers bound to the aggregation layer and listing store"""

    def __init__(self, data_service: RealEstateDataService, repository: ListingRepository):
        self.data_service = data_service
        self.repository = repository
        self.comparable_sales_analyzer = ComparableSalesAnalyzer(repository, data_service)

    async def investment_calculator(self, params: InvestmentCalculatorInput) -> Dict[str, Any]:
        return calculate_investment_metrics(**params.model_dump())

    async def property_database(self, params: PropertyDatabaseInput) -> Any:
        filters = params.filters or PropertyDatabaseFilters()

        if params.query_type == "property":
            return await self.data_service.fetch_property_listings(PropertySearchParams(
                location=filters.location,
                min_price=filters.min_price,
                max_price=filters.max_price,
                bedrooms=filters.bedrooms,
                bathrooms=filters.bathrooms,
                property_type=filters.property_type,
                limit=filters.limit or 10,
            ))

        if params.query_type == "market-trends":
            return await self.data_service.fetch_market_trends(region=filters.location, months=filters.limit or 12)

        if params.query_type == "deals":
            rows = await self.repository.top_deals(min_deal_score=filters.deal_score, limit=filters.limit or 10)
            return [row_to_dict(row) for row in rows]

        if not filters.user_id:
            raise ValueError("User ID is required for saved properties query")
        saved = await self.repository.saved_listings(filters.user_id, limit=filters.limit or 10)
        return [
            {**row_to_dict(item), 'listing': row_to_dict(item.listing) if item.listing else None}
            for item in saved
        ]

    async def real_estate_search(self, params: RealEstateSearchInput) -> Dict[str, Any]:
        location = params.location

        if params.data_type == "market-trends":
            trends = await self.data_service.fetch_market_trends(region=location, months=6)
            return {
                'trends': [
                    {
                        'title': f"Housing Market Trends in {trend.region} - {trend.month}/{trend.year}",
                        'summary': (
                            f"The housing market in {trend.region} has shown a {trend.price_change_pct}% change in "
                            f"median home prices. Average days on market is {trend.avg_days_on_market} days with "
                            f"{trend.inventory_count} properties available."
                        ),
                        'source': trend.source,
                    }
                    for trend in trends
                ]
            }

        if params.data_type == "property-values":
            return await self._property_values(location)

        if params.data_type == "investment-opportunities":
            return await self._investment_opportunities(location)

        return await self._neighborhoods(location)

    async def _property_values(self, location: Optional[str]) -> Dict[str, Any]:
        properties = await self.data_service.fetch_property_listings(PropertySearchParams(location=location, limit=1))
        if not properties:
            return {
                'valuations': [
                    {'metric': "Median Home Price", 'value': "$450,000" if location else "$375,000", 'change': "+3.2% YoY"},
                    {'metric': "Price Per Square Foot", 'value': "$275" if location else "$195", 'change': "+2.8% YoY"},
                    {'metric': "Appreciation Forecast (5-Year)", 'value': "15.7%", 'source': "Housing Market Forecast"},
                ]
            }

        subject = properties[0]
        valuation = await self.data_service.get_property_valuation(subject.id, base_price=subject.price)
        history = valuation.historical_values
        trend = (history[-1].value / history[0].value - 1) * 100 if history and history[0].value else 0.0
        vs_list = (valuation.estimated_value - subject.price) / subject.price * 100 if subject.price else 0.0

        return {
            'valuations': [
                {
                    'metric': "Estimated Value",
                    'value': money(valuation.estimated_value),
                    'change': f"{vs_list:.1f}% vs. List Price",
                },
                {
                    'metric': "Value Range",
                    'value': f"{money(valuation.valuation_range.low)} - {money(valuation.valuation_range.high)}",
                    'change': "Valuation Confidence Range",
                },
                {
                    'metric': "Historical Trend (1-Year)",
                    'value': f"{trend:.1f}%",
                    'source': valuation.source,
                },
            ]
        }

    async def _investment_opportunities(self, location: Optional[str]) -> Dict[str, Any]:
        loc = parse_location(location) if location else None
        if loc and loc['city'] and loc['state']:
            info = await self.data_service.get_neighborhood_info(loc['city'], loc['state'])
            return {
                'opportunities': [
                    {
                        'type': "Market Overview",
                        'description': (
                            f"The {location} market has a median home value of {money(info.overview.median_home_value)} "
                            f"with a {info.market_trends.home_value_trend} year-over-year change. Properties are selling "
                            f"in an average of {info.market_trends.average_days_on_market} days."
                        ),
                        'potential_roi': info.market_trends.forecast_next_year,
                    },
                    {
                        'type': "Rental Market",
                        'description': (
                            f"The rental market in {location} has a median rent of "
                            f"{money(info.market_trends.median_rent)}/month, providing potential for strong cash flow."
                        ),
                        'potential_roi': "Annual cash-on-cash return potential of 7-9%",
                    },
                ]
            }

        return {
            'opportunities': [
                {
                    'type': "Emerging Neighborhoods",
                    'description': (
                        f"Analysis shows that the {location or 'southeastern'} region is experiencing rapid development "
                        "with new infrastructure projects, making it a prime area for investment before prices "
                        "increase significantly."
                    ),
                    'potential_roi': "12-15% over 3 years",
                },
                {
                    'type': "Multi-Family Properties",
                    'description': (
                        f"Multi-family properties in {location or 'this area'} are showing strong rental demand with "
                        "cap rates averaging 6.2%, higher than the national average of 5.1%."
                    ),
                    'potential_roi': "Annual cash-on-cash return of 8-10%",
                },
            ]
        }

    async def _neighborhoods(self, location: Optional[str]) -> Dict[str, Any]:
        loc = parse_location(location) if location else None
        if loc and loc['city'] and loc['state']:
            info = await self.data_service.get_neighborhood_info(loc['city'], loc['state'])
            school_rating = info.schools[0].rating if info.schools else 8
            return {
                'neighborhoods': [
                    {
                        'name': location,
                        'school_rating': f"{school_rating:g}/10",
                        'crime_rate': info.crime_rate.overall,
                        'walkability': f"{info.transportation.walk_score}/100",
                        'amenities': [
                            f"{info.amenities.restaurants} Restaurants",
                            f"{info.amenities.grocery_stores} Grocery Stores",
                            f"{info.amenities.parks} Parks",
                            f"{info.amenities.hospitals} Hospitals",
                        ],
                        'median_home_value': money(info.overview.median_home_value),
                    }
                ]
            }

        return {
            'neighborhoods': [
                {
                    'name': location or "Sample Neighborhood",
                    'school_rating': "8/10",
                    'crime_rate': "Low - 15% below national average",
                    'walkability': "72/100",
                    'amenities': ["Parks", "Shopping Centers", "Public Transportation"],
                    'median_home_value': "$425,000",
                }
            ]
        }

    async def comparative_market_analysis(self, params: ComparativeMarketAnalysisInput) -> Dict[str, Any]:
        return await self.comparable_sales_analyzer.analyze_comps(
            params.property_id, radius=params.radius, max_comps=params.max_comps
        )

    async def market_insights(self, params: RegionInput) -> Dict[str, Any]:
        insights = await self.data_service.get_market_insights(params.region, params.region_type)
        metrics = insights.metrics
        forecast = insights.forecast
        return {
            'region': insights.region,
            'region_type': insights.region_type,
            'current_metrics': {
                'median_price': money(metrics.median_price),
                'price_change_pct': f"{metrics.price_change_pct}%",
                'avg_days_on_market': metrics.avg_days_on_market,
                'inventory_count': metrics.inventory_count,
                'median_rent_price': money(metrics.median_rent_price) if metrics.median_rent_price else "N/A",
                'rent_yield': f"{metrics.rent_yield}%" if metrics.rent_yield else "N/A",
            },
            'market_conditions': {
                'affordability_rating': affordability_rating(metrics.affordability_index),
                'market_heat_rating': market_heat_rating(metrics.market_heat_index),
                'investment_potential': investment_potential(forecast.medium_term.price_change_pct),
                'price_to_rent_ratio': f"{metrics.price_to_rent_ratio:.1f}" if metrics.price_to_rent_ratio else "N/A",
            },
            'forecast': {
                horizon: {
                    'price_change_pct': f"{point.price_change_pct}%",
                    'confidence': f"{point.confidence:g}%",
                    'timeframe': timeframe,
                }
                for horizon, point, timeframe in (
                    ('short_term', forecast.short_term, "3-6 months"),
                    ('medium_term', forecast.medium_term, "1-2 years"),
                    ('long_term', forecast.long_term, "3-5 years"),
                )
            },
            'actionable_insights': market_actionable_insights(insights),
        }

    async def property_investment_analysis(self, params: PropertyInvestmentAnalysisInput) -> Dict[str, Any]:
        analysis = await self.data_service.get_property_analysis(params.property_id)
        fm = analysis.financial_metrics
        return {
            'property_id': analysis.property_id,
            'overall_score': analysis.overall_score,
            'score_breakdown': {
                'valuation': analysis.valuation_score,
                'investment': analysis.investment_score,
                'rental': analysis.rental_score,
                'appreciation': analysis.appreciation_score,
                'cash_flow': analysis.cash_flow_score,
                'risk': analysis.risk_score,
            },
            'financial_metrics': {
                'estimated_value': money(fm.estimated_value),
                'estimated_rent': f"{money(fm.estimated_rent)}/month",
                'cap_rate': f"{fm.cap_rate}%",
                'cash_on_cash_return': f"{fm.cash_on_cash_return}%",
                'net_operating_income': f"{money(fm.net_operating_income)}/year",
                'break_even_ratio': fm.break_even_ratio,
            },
            'insights': analysis.insights,
            'recommendations': analysis.recommendations,
            'actionable_recommendations': score_recommendations(analysis),
            'comparable_properties': [
                {
                    'address': comp.address,
                    'price': money(comp.price),
                    'price_per_sq_ft': f"${comp.price_per_sq_ft:g}/sqft",
                    'bed_bath': f"{comp.bedrooms}bd/{comp.bathrooms:g}ba",
                    'square_feet': f"{comp.square_feet:,} sqft",
                    'year_built': comp.year_built,
                    'distance': f"{comp.distance:g} miles",
                    'similarity': f"{comp.similarity:g}%",
                }
                for comp in analysis.comparable_properties
            ],
        }

    async def opportunity_zone_analysis(self, params: RegionInput) -> Dict[str, Any]:
        zones = await self.data_service.get_opportunity_zones(params.region, params.region_type)
        ranked = sorted(zones, key=lambda zone: zone.opportunity_score, reverse=True)

        return {
            'region': params.region,
            'region_type': params.region_type or "city",
            'opportunity_zones': [
                {
                    'name': zone.region,
                    'opportunity_score': zone.opportunity_score,
                    'key_metrics': {
                        'median_price': money(zone.metrics.median_price),
                        'price_change_pct': f"{zone.metrics.price_change_pct}%",
                        'avg_days_on_market': zone.metrics.avg_days_on_market,
                        'rental_demand': f"{zone.metrics.rental_demand:g}/100",
                        'job_growth': f"{zone.metrics.job_growth}%",
                        'population_growth': f"{zone.metrics.population_growth}%",
                    },
                    'recommended_property_types': zone.recommended_property_types,
                    'insights': zone.insights,
                    'risk_factors': zone.risk_factors,
                }
                for zone in ranked
            ],
            'actionable_insights': zone_actionable_insights(ranked),
            'investment_strategy': {
                'short_term': "Focus on properties with immediate cash flow potential in top opportunity zones",
                'medium_term': (
                    "Balance between cash flow and appreciation potential, with emphasis on areas showing "
                    "strong job and population growth"
                ),
                'long_term': (
                    "Prioritize areas with significant development activity and infrastructure improvements "
                    "for maximum appreciation"
                ),
            },
        }


# ============================================================================
# RATINGS
# ============================================================================

def affordability_rating(index: Optional[float]) -> str:
    index = index or 0
    if index > 80:
        return "Highly Affordable"
    if index > 60:
        return "Affordable"
    if index > 40:
        return "Moderately Affordable"
    return "Less Affordable"


def market_heat_rating(index: Optional[float]) -> str:
    index = index or 0
    if index > 80:
        return "Very Hot"
    if index > 60:
        return "Hot"
    if index > 40:
        return "Balanced"
    return "Cool"


def investment_potential(medium_term_change: float) -> str:
    if medium_term_change > 5:
        return "Excellent"
    if medium_term_change > 3:
        return "Good"
    if medium_term_change > 1:
        return "Moderate"
    return "Limited"


def market_actionable_insights(insights) -> List[str]:
    metrics = insights.metrics
    medium_term = insights.forecast.medium_term.price_change_pct
    result = []

    if metrics.price_change_pct > 5:
        result.append("Market is appreciating rapidly - consider buying sooner rather than later")
    elif metrics.price_change_pct < 0:
        result.append("Market is experiencing a correction - potential buying opportunities may emerge")
    else:
        result.append("Market is stable - focus on property-specific value rather than market timing")

    if metrics.avg_days_on_market < 20:
        result.append("Properties are selling quickly - be prepared to act fast on good deals")
    elif metrics.avg_days_on_market > 60:
        result.append("Properties are sitting on market longer - opportunity for price negotiations")
    else:
        result.append("Average market pace - standard due diligence timeframes should be sufficient")

    if metrics.rent_yield and metrics.rent_yield > 6:
        result.append("Strong rental yields indicate good cash flow potential for investors")
    elif metrics.rent_yield and metrics.rent_yield < 4:
        result.append("Low rental yields may require focus on appreciation rather than cash flow")
    else:
        result.append("Moderate rental yields - balance cash flow and appreciation in investment strategy")

    if medium_term > 10:
        result.append("Strong appreciation forecast - consider buy-and-hold strategy")
    elif medium_term < 2:
        result.append("Limited appreciation forecast - focus on immediate cash flow or value-add opportunities")
    else:
        result.append("Moderate appreciation forecast - balanced investment approach recommended")

    return result


def score_recommendations(analysis) -> List[str]:
    result = []

    if analysis.valuation_score > 85:
        result.append("Property appears to be undervalued - consider making an offer at or near asking price")
    elif analysis.valuation_score < 70:
        result.append("Property may be overvalued - consider negotiating price or looking for alternative properties")

    if analysis.rental_score > 85:
        result.append("Excellent rental potential - property would make a strong rental investment")

    if analysis.cash_flow_score > 85:
        result.append("Strong cash flow potential - property should generate positive cash flow from day one")
    elif analysis.cash_flow_score < 70:
        result.append(
            "Limited cash flow potential - may require additional capital or rent increases "
            "to achieve positive cash flow"
        )

    if analysis.appreciation_score > 85:
        result.append("High appreciation potential - property located in area with strong growth indicators")

    if analysis.risk_score > 80:
        result.append("Higher risk profile - consider additional due diligence or risk mitigation strategies")
    elif analysis.risk_score < 50:
        result.append("Low risk profile - property represents a relatively safe investment")

    return result


def zone_actionable_insights(ranked_zones) -> List[str]:
    if not ranked_zones:
        return []

    top = ranked_zones[0]
    result = [
        f"{top.region} has the highest opportunity score ({top.opportunity_score:g}) - prioritize this area for investment"
    ]
    if top.metrics.rental_demand > 85:
        result.append(f"{top.region} has exceptionally high rental demand - rental properties should perform well")
    if top.metrics.price_change_pct > 5:
        result.append(
            f"{top.region} is experiencing rapid price appreciation ({top.metrics.price_change_pct}%) "
            "- consider buying sooner rather than later"
        )
    if top.metrics.new_development > 10:
        result.append(f"{top.region} has significant new development activity - indicates strong growth potential")
    if top.metrics.job_growth > 3:
        result.append(
            f"{top.region} has strong job growth ({top.metrics.job_growth}%) - positive indicator for long-term demand"
        )
    return result


# ============================================================================
# FACTORY
# ============================================================================

def build_tool_set(data_service: RealEstateDataService, repository: ListingRepository) -> ToolSet:
    """All seven tools bound to the given services"""
    handlers = RealEstateTools(data_service, repository)
    return ToolSet([
        ToolDefinition(
            name="investment-calculator",
            description="Calculate investment metrics for real estate properties",
            input_model=InvestmentCalculatorInput,
            handler=handlers.investment_calculator,
        ),
        ToolDefinition(
            name="property-database",
            description="Query the database for property information and market trends",
            input_model=PropertyDatabaseInput,
            handler=handlers.property_database,
        ),
        ToolDefinition(
            name="real-estate-search",
            description="Search for real estate market data and trends",
            input_model=RealEstateSearchInput,
            handler=handlers.real_estate_search,
        ),
        ToolDefinition(
            name="comparative-market-analysis",
            description="Perform a comparative market analysis for a property",
            input_model=ComparativeMarketAnalysisInput,
            handler=handlers.comparative_market_analysis,
        ),
        ToolDefinition(
            name="market-insights",
            description="Get detailed market insights for a specific region",
            input_model=RegionInput,
            handler=handlers.market_insights,
        ),
        ToolDefinition(
            name="property-investment-analysis",
            description="Get detailed investment analysis for a specific property",
            input_model=PropertyInvestmentAnalysisInput,
            handler=handlers.property_investment_analysis,
        ),
        ToolDefinition(
            name="opportunity-zone-analysis",
            description="Identify and analyze real estate investment opportunity zones in a region",
            input_model=RegionInput,
            handler=handlers.opportunity_zone_analysis,
        ),
    ])
