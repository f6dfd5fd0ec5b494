"""
FastAPI routes for PropLens

Thin HTTP layer over the data service, the agent runner and the investment
workflows. PropertyNotFound and AgentNotFound map to 404; anything else
unexpected is logged and returned as 500.
"""

from typing import Any, Dict, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field

from ..agent.workflows import StrategyRequest
from ..container import Container
from ..data_sources.models import PropertySearchParams
from ..exceptions import AgentNotFound, PropertyNotFound

logger = structlog.get_logger(__name__)
router = APIRouter(tags=["PropLens"])


def get_container(request: Request) -> Container:
    return request.app.state.container


def require(value: Optional[str], message: str) -> str:
    if not value:
        raise HTTPException(status_code=400, detail=message)
    return value


class AgentRunRequest(BaseModel):
    prompt: str = Field(..., min_length=1)


class AgentNetworkRequest(BaseModel):
    prompts: Dict[str, str]


class SavedListingToggle(BaseModel):
    user_id: str
    listing_id: str


# ============================================================================
# PROPERTIES
# ============================================================================

@router.get("/properties")
async def search_properties(
    location: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    bedrooms: Optional[int] = None,
    bathrooms: Optional[float] = None,
    property_type: Optional[str] = None,
    limit: int = Query(10, ge=1, le=100),
    container: Container = Depends(get_container)
) -> Dict[str, Any]:
    """Search listings across providers and the listing store"""
    try:
        params = PropertySearchParams(
            location=location,
            min_price=min_price,
            max_price=max_price,
            bedrooms=bedrooms,
            bathrooms=bathrooms,
            property_type=property_type,
            limit=limit,
        )
        properties = await container.data_service.fetch_property_listings(params)
        return {"properties": properties}

    except Exception as e:
        logger.error("property_search_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch properties")


@router.get("/property/cma")
async def property_cma(
    property_id: Optional[str] = None,
    radius: float = Query(1, gt=0),
    max_comps: int = Query(5, ge=1, le=50),
    container: Container = Depends(get_container)
) -> Dict[str, Any]:
    """Comparative market analysis for a listing"""
    try:
        property_id = require(property_id, "Property ID parameter is required")
        cma = await container.workflows.run_cma_analysis(property_id, radius=radius, max_comps=max_comps)
        return {"cma": cma}

    except HTTPException:
        raise
    except PropertyNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("cma_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to generate CMA")


@router.get("/property/analysis")
async def property_analysis(
    property_id: Optional[str] = None,
    container: Container = Depends(get_container)
) -> Dict[str, Any]:
    try:
        property_id = require(property_id, "Property ID parameter is required")
        analysis = await container.data_service.get_property_analysis(property_id)
        return {"analysis": analysis}

    except HTTPException:
        raise
    except PropertyNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("property_analysis_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch property analysis")


@router.get("/property/valuation")
async def property_valuation(
    property_id: Optional[str] = None,
    container: Container = Depends(get_container)
) -> Dict[str, Any]:
    try:
        property_id = require(property_id, "Property ID parameter is required")
        valuation = await container.data_service.get_property_valuation(property_id)
        return {"valuation": valuation}

    except HTTPException:
        raise
    except PropertyNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("property_valuation_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch property valuation")


@router.get("/property/realtime")
async def property_realtime(
    property_id: Optional[str] = None,
    container: Container = Depends(get_container)
) -> Dict[str, Any]:
    """Listing with valuation, analysis, neighborhood, trends and insights in one payload"""
    try:
        property_id = require(property_id, "Property ID parameter is required")
        return await container.workflows.get_real_time_property_data(property_id)

    except HTTPException:
        raise
    except PropertyNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("realtime_property_data_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch property data")


@router.get("/property/ai-analysis")
async def property_ai_analysis(
    property_id: Optional[str] = None,
    type: str = Query("property", pattern="^(property|investment|neighborhood)$"),
    container: Container = Depends(get_container)
) -> Dict[str, Any]:
    try:
        property_id = require(property_id, "Property ID is required")
        analysis = await container.workflows.property_ai_analysis(property_id, type)
        return {"analysis": analysis}

    except HTTPException:
        raise
    except PropertyNotFound:
        raise HTTPException(status_code=404, detail="Property not found")
    except Exception as e:
        logger.error("property_ai_analysis_failed", property_id=property_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to generate analysis")


@router.post("/properties/saved/toggle")
async def toggle_saved_property(
    body: SavedListingToggle,
    container: Container = Depends(get_container)
) -> Dict[str, Any]:
    """Save a listing for a user, or unsave it when already saved"""
    try:
        if await container.repository.get_listing(body.listing_id) is None:
            raise PropertyNotFound(body.listing_id)

        saved = await container.repository.toggle_saved_listing(body.user_id, body.listing_id)
        return {"listing_id": body.listing_id, "saved": saved}

    except PropertyNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("saved_listing_toggle_failed", listing_id=body.listing_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to update saved property")


# ============================================================================
# MARKET
# ============================================================================

@router.get("/market/insights")
async def market_insights(
    region: Optional[str] = None,
    region_type: Optional[str] = None,
    container: Container = Depends(get_container)
) -> Dict[str, Any]:
    try:
        region = require(region, "Region parameter is required")
        insights = await container.data_service.get_market_insights(region, region_type)
        return {"insights": insights}

    except HTTPException:
        raise
    except Exception as e:
        logger.error("market_insights_failed", region=region, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch market insights")


@router.get("/market/opportunity-zones")
async def opportunity_zones(
    region: Optional[str] = None,
    region_type: Optional[str] = None,
    container: Container = Depends(get_container)
) -> Dict[str, Any]:
    try:
        region = require(region, "Region parameter is required")
        zones = await container.data_service.get_opportunity_zones(region, region_type)
        return {"zones": zones}

    except HTTPException:
        raise
    except Exception as e:
        logger.error("opportunity_zones_failed", region=region, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch opportunity zones")


@router.get("/market/trends")
async def market_trends(
    region: Optional[str] = None,
    region_type: Optional[str] = None,
    months: int = Query(12, ge=1, le=120),
    container: Container = Depends(get_container)
) -> Dict[str, Any]:
    try:
        trends = await container.data_service.fetch_market_trends(region, region_type, months)
        return {"trends": trends}

    except Exception as e:
        logger.error("market_trends_failed", region=region, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch market trends")


@router.get("/market/neighborhood")
async def neighborhood(
    city: Optional[str] = None,
    state: Optional[str] = None,
    zip_code: Optional[str] = None,
    container: Container = Depends(get_container)
) -> Dict[str, Any]:
    try:
        city = require(city, "City parameter is required")
        state = require(state, "State parameter is required")
        info = await container.data_service.get_neighborhood_info(city, state, zip_code)
        return {"neighborhood": info}

    except HTTPException:
        raise
    except Exception as e:
        logger.error("neighborhood_info_failed", city=city, state=state, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch neighborhood info")


@router.get("/market/analysis")
async def market_analysis(container: Container = Depends(get_container)) -> Dict[str, Any]:
    try:
        return {"analysis": await container.workflows.analyze_market()}

    except Exception as e:
        logger.error("market_analysis_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to generate market analysis")


@router.get("/market/predictions")
async def market_predictions(container: Container = Depends(get_container)) -> Dict[str, Any]:
    try:
        return {"prediction": await container.workflows.predict_market()}

    except Exception as e:
        logger.error("market_predictions_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to generate market predictions")


# ============================================================================
# DEALS AND INVESTMENT
# ============================================================================

@router.get("/deals/analysis")
async def deal_analysis(container: Container = Depends(get_container)) -> Dict[str, Any]:
    try:
        return {"analysis": await container.workflows.analyze_deals()}

    except Exception as e:
        logger.error("deal_analysis_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to generate deal analysis")


@router.post("/investment/strategy")
async def investment_strategy(
    body: StrategyRequest,
    container: Container = Depends(get_container)
) -> Dict[str, Any]:
    try:
        result = await container.workflows.generate_investment_strategy(body)
        response = {"strategy": result['investment_strategy']}
        if 'notice' in result:
            response["notice"] = result['notice']
        return response

    except Exception as e:
        logger.error("investment_strategy_failed", region=body.region, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to process request")


@router.get("/investment/opportunities")
async def investment_opportunities(
    region: Optional[str] = None,
    region_type: Optional[str] = None,
    container: Container = Depends(get_container)
) -> Dict[str, Any]:
    try:
        region = require(region, "Region parameter is required")
        return await container.workflows.get_investment_opportunities(region, region_type)

    except HTTPException:
        raise
    except Exception as e:
        logger.error("investment_opportunities_failed", region=region, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch investment opportunities")


# ============================================================================
# AGENTS
# ============================================================================

@router.post("/agents/{agent_key}/run")
async def run_agent(
    agent_key: str,
    body: AgentRunRequest,
    container: Container = Depends(get_container)
) -> Dict[str, Any]:
    try:
        response = await container.runner.run_agent(agent_key, body.prompt)
        return {"agent": agent_key, "response": response}

    except AgentNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error("agent_route_failed", agent=agent_key, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to run agent")


@router.post("/agents/network")
async def run_agent_network(
    body: AgentNetworkRequest,
    container: Container = Depends(get_container)
) -> Dict[str, Any]:
    try:
        return {"results": await container.runner.run_agent_network(body.prompts)}

    except Exception as e:
        logger.error("agent_network_route_failed", agents=list(body.prompts), error=str(e))
        raise HTTPException(status_code=500, detail="Failed to run agent network")


@router.get("/health")
async def health(container: Container = Depends(get_container)) -> Dict[str, Any]:
    db_health = await container.db.health_check()
    return {
        "status": "healthy" if db_health["database"] else "degraded",
        **db_health,
        "providers": {b.provider_id: b.has_credential for b in container.providers.bindings()},
        "use_real_apis": container.settings.USE_REAL_APIS,
        "cache_entries": len(container.cache),
    }
