"""
Investment Workflows

Composite operations over the data service and the agents. Data lookups
propagate PropertyNotFound; the narrative parts fall back to static text
whenever no provider is configured or generation fails.
"""

from typing import Any, Dict, Optional

import structlog
from pydantic import BaseModel, Field

from ..database.repository import ListingRepository
from ..exceptions import PropertyNotFound
from ..providers.registry import ProviderRegistry
from ..services.aggregation import RealEstateDataService
from . import prompts
from .runner import FALLBACK_ANALYSIS_TEXT, AgentRunner
from .tools import ToolSet, row_to_dict

logger = structlog.get_logger(__name__)

OPPORTUNITY_ANALYSIS_UNAVAILABLE = "AI analysis currently unavailable. Please try again later."

STRATEGY_FALLBACK_NOTICE = "Using fallback strategy generator. AI service unavailable."

DEAL_ANALYSIS_HTML = """<p>Our analysis indicates that the current top deals represent excellent investment opportunities due to their below-market pricing, strong rental potential, and location in high-growth areas.</p>
<p>Properties with high deal scores typically show a combination of favorable price-to-rent ratios, below-market acquisition costs, and strong appreciation potential based on local market trends.</p>
<p>Consider focusing on properties with deal scores above 15%, as these often represent the best balance of risk and reward in the current market.</p>"""

MARKET_ANALYSIS_HTML = """<h2>Current US Real Estate Market Overview</h2>
<p>The US real estate market continues to show regional variations with some markets experiencing moderate growth while others face challenges with affordability and inventory constraints.</p>

<h3>Key Observations:</h3>
<ul>
  <li>Mortgage rates have stabilized but remain higher than historical averages</li>
  <li>Housing inventory has improved slightly but remains below pre-pandemic levels</li>
  <li>Price appreciation has moderated in most markets</li>
  <li>Regional markets show significant variation in performance</li>
  <li>Rental markets remain strong in most metropolitan areas</li>
</ul>

<p>Investors should focus on markets with strong economic fundamentals, population growth, and diversified employment sectors.</p>"""

MARKET_PREDICTION_HTML = """<h2>Real Estate Market Forecast</h2>

<h3>Short-Term Outlook (3 months)</h3>
<p>The market is expected to maintain current conditions with modest price growth in most regions. Seasonal patterns will likely influence activity levels with some slowdown during winter months.</p>

<h3>Medium-Term Outlook (6 months)</h3>
<p>Mortgage rates may see modest adjustments based on Federal Reserve policies. Housing inventory is expected to gradually improve, providing more options for buyers and potentially moderating price growth.</p>

<h3>Long-Term Outlook (12 months)</h3>
<p>The market is projected to continue its normalization process with more balanced conditions between buyers and sellers. Regional variations will persist, with stronger growth in areas with positive migration patterns and job creation.</p>

<h3>Investment Implications</h3>
<p>Investors should consider:</p>
<ul>
  <li>Cash flow opportunities in stable markets</li>
  <li>Value-add strategies in emerging neighborhoods</li>
  <li>Long-term appreciation potential in high-growth metros</li>
  <li>Portfolio diversification across different property types and locations</li>
</ul>"""

PROPERTY_ANALYSIS_AGENTS = {
    'property': "deal-finder",
    'investment': "investment-advisor",
    'neighborhood': "neighborhood-analyst",
}


class StrategyRequest(BaseModel):
    region: str = Field(..., min_length=1)
    budget: float = 250000
    investment_goals: str = "Balanced approach (cash flow and appreciation)"
    time_horizon: str = "Medium-term (3-5 years)"
    risk_tolerance: str = "Moderate"


def fallback_strategy(params: StrategyRequest) -> str:
    return f"""# Investment Strategy for {params.region}

## Market Overview
Based on our analysis, {params.region} shows potential for real estate investment with varying opportunities depending on your goals.

## Recommended Strategy
Given your budget of ${params.budget:,.0f}, {params.investment_goals} goals, {params.time_horizon} horizon, and {params.risk_tolerance} risk tolerance:

### Property Types to Target
- Single-family homes in growing neighborhoods
- Small multi-family properties (2-4 units)
- Condos in central locations with good rental demand

### Acquisition Strategy
- Focus on properties priced 10-15% below market value
- Target properties requiring minor cosmetic renovations
- Consider off-market opportunities through networking

### Financing Approach
- Conventional financing with 20-25% down payment
- Consider portfolio loans for multiple properties
- Maintain cash reserves of 6 months per property

### Exit Strategy
- Hold for long-term appreciation and cash flow
- Refinance after 3-5 years to extract equity
- Consider 1031 exchanges for portfolio growth

### Risk Mitigation
- Diversify across different neighborhoods
- Maintain adequate insurance coverage
- Build relationships with reliable contractors

This strategy is based on current market conditions and should be reviewed periodically as the market evolves.
"""


def static_property_analysis(analysis_type: str, listing) -> str:
    price_per_sqft = round(listing.price / listing.square_feet) if listing.square_feet else 0
    deal_score = listing.deal_score or 0
    strong = deal_score > 5

    if analysis_type == "property":
        return f"""<h2>Property Analysis</h2>
<p>This {listing.bedrooms} bedroom, {listing.bathrooms:g} bathroom property in {listing.city}, {listing.state} offers good investment potential. At {listing.square_feet} square feet, the price per square foot is ${price_per_sqft}.</p>

<p>Key features of this property include:</p>
<ul>
  <li>Property Type: {listing.property_type}</li>
  <li>Year Built: {listing.year_built}</li>
  <li>Price: ${listing.price:,.0f}</li>
</ul>

<p>Based on comparable properties in the area, this property appears to be priced {deal_score:g}% below market value, representing a potential opportunity for investors.</p>"""

    if analysis_type == "investment":
        monthly_cash_flow = listing.price * 0.003
        cap_rate = monthly_cash_flow * 12 / listing.price * 100 if listing.price else 0
        cash_on_cash = monthly_cash_flow * 12 / (listing.price * 0.2) * 100 if listing.price else 0
        use = "family rental" if listing.bedrooms >= 3 else "starter home or small family rental"
        return f"""<h2>Investment Analysis</h2>
<p>This property presents a {"strong" if strong else "moderate"} investment opportunity in {listing.city}, {listing.state}.</p>

<h3>Financial Overview</h3>
<ul>
  <li>Purchase Price: ${listing.price:,.0f}</li>
  <li>Estimated Monthly Rent: ${listing.price * 0.005:,.0f}</li>
  <li>Estimated Monthly Expenses: ${listing.price * 0.002:,.0f}</li>
  <li>Estimated Monthly Cash Flow: ${monthly_cash_flow:,.0f}</li>
  <li>Cap Rate: {cap_rate:.1f}%</li>
  <li>Cash on Cash Return (20% down): {cash_on_cash:.1f}%</li>
</ul>

<p>This property could work well as a {use} with good potential for appreciation in this growing market.</p>"""

    return f"""<h2>Neighborhood Analysis</h2>
<p>{listing.city}, {listing.state} is a {"growing" if strong else "stable"} market with good amenities and infrastructure.</p>

<h3>Area Highlights</h3>
<ul>
  <li>Schools: The area has several well-rated public and private schools within a short distance</li>
  <li>Shopping: Multiple shopping centers and grocery stores are conveniently located nearby</li>
  <li>Transportation: The neighborhood offers good access to major roads and public transportation</li>
  <li>Parks and Recreation: Several parks and recreational facilities are available in the vicinity</li>
</ul>

<p>The neighborhood has shown {"strong" if strong else "steady"} property value appreciation over the past few years, making it a {"desirable" if strong else "reasonable"} location for real estate investment.</p>"""


class InvestmentWorkflows:
    """
    Usage:
        workflows = InvestmentWorkflows(data_service, repository, runner, providers, tools)
        data = await workflows.get_real_time_property_data(property_id)
        strategy = await workflows.generate_investment_strategy(StrategyRequest(region="Austin, TX"))
    """

    def __init__(
        self,
        data_service: RealEstateDataService,
        repository: ListingRepository,
        runner: AgentRunner,
        providers: ProviderRegistry,
        tools: ToolSet
    ):
        self.data_service = data_service
        self.repository = repository
        self.runner = runner
        self.providers = providers
        self.tools = tools

    async def _load_listing(self, property_id: str):
        listing = await self.repository.get_listing(property_id)
        if listing is None:
            raise PropertyNotFound(property_id)
        return listing

    async def get_real_time_property_data(self, property_id: str) -> Dict[str, Any]:
        listing = await self._load_listing(property_id)

        valuation = await self.data_service.get_property_valuation(property_id)
        analysis = await self.data_service.get_property_analysis(property_id)
        neighborhood = await self.data_service.get_neighborhood_info(
            listing.city, listing.state, zip_code=listing.zip_code
        )
        trends = await self.data_service.fetch_market_trends(region=listing.city, months=6)
        insights = await self.data_service.get_market_insights(listing.city)

        return {
            'property': row_to_dict(listing),
            'valuation': valuation,
            'analysis': analysis,
            'neighborhood_info': neighborhood,
            'market_trends': trends,
            'market_insights': insights,
        }

    async def run_cma_analysis(self, property_id: str, radius: float = 1, max_comps: int = 5) -> Dict[str, Any]:
        return await self.tools.execute(
            "comparative-market-analysis",
            {'property_id': property_id, 'radius': radius, 'max_comps': max_comps},
        )

    async def get_investment_opportunities(self, region: str, region_type: Optional[str] = None) -> Dict[str, Any]:
        zones = await self.data_service.get_opportunity_zones(region, region_type)
        insights = await self.data_service.get_market_insights(region, region_type)

        analysis = await self.runner.run_agent("opportunity-finder", prompts.opportunity_prompt(region))
        if analysis == FALLBACK_ANALYSIS_TEXT:
            analysis = OPPORTUNITY_ANALYSIS_UNAVAILABLE

        return {
            'opportunity_zones': zones,
            'market_insights': insights,
            'opportunity_analysis': analysis,
        }

    async def generate_investment_strategy(self, params: StrategyRequest) -> Dict[str, Any]:
        insights = await self.data_service.get_market_insights(params.region)
        zones = await self.data_service.get_opportunity_zones(params.region)

        strategy = None
        if self.providers.has_any_provider:
            strategy = await self.runner.run_agent(
                "investment-strategist",
                prompts.strategy_prompt(
                    params.region, params.budget, params.investment_goals,
                    params.time_horizon, params.risk_tolerance,
                ),
            )

        result = {
            'market_insights': insights,
            'opportunity_zones': zones[:3],
        }
        if strategy is None or strategy == FALLBACK_ANALYSIS_TEXT:
            logger.info("strategy_fallback_used", region=params.region)
            result['investment_strategy'] = fallback_strategy(params)
            result['notice'] = STRATEGY_FALLBACK_NOTICE
        else:
            result['investment_strategy'] = strategy
        return result

    async def property_ai_analysis(self, property_id: str, analysis_type: str = "property") -> str:
        """
        Per-property narrative for analysis_type property, investment or neighborhood.

        Raises:
            PropertyNotFound: the listing is not in the store
        """
        listing = await self._load_listing(property_id)
        agent_key = PROPERTY_ANALYSIS_AGENTS.get(analysis_type)
        if agent_key is None:
            return "Analysis not available."

        analysis = static_property_analysis(analysis_type, listing)
        if not self.providers.has_any_provider:
            return analysis

        text = await self.runner.run_agent(agent_key, prompts.property_prompt(analysis_type, listing))
        if text and text != FALLBACK_ANALYSIS_TEXT:
            return text
        return analysis

    async def analyze_deals(self) -> str:
        if not self.providers.has_any_provider:
            return DEAL_ANALYSIS_HTML

        text = await self.runner.run_agent("deal-finder", prompts.DEAL_ANALYSIS_PROMPT)
        if text == FALLBACK_ANALYSIS_TEXT:
            return DEAL_ANALYSIS_HTML
        return text

    async def _one_shot_report(self, system: str, prompt: str, fallback: str, event: str) -> str:
        try:
            model = self.providers.resolve("openai")
            return await model.generate_text(system, prompt)
        except Exception as e:
            logger.warning(event, error=str(e))
            return fallback

    async def analyze_market(self) -> str:
        return await self._one_shot_report(
            prompts.MARKET_ANALYSIS_SYSTEM,
            prompts.MARKET_ANALYSIS_PROMPT,
            MARKET_ANALYSIS_HTML,
            "market_analysis_fallback",
        )

    async def predict_market(self) -> str:
        return await self._one_shot_report(
            prompts.MARKET_PREDICTION_SYSTEM,
            prompts.MARKET_PREDICTION_PROMPT,
            MARKET_PREDICTION_HTML,
            "market_prediction_fallback",
        )
