"""
Agent Registry

Eight specialist agents, each bound to one provider, a system prompt,
a subset of the tool set and a tool-step budget.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from ..exceptions import AgentNotFound
from . import prompts

CALCULATOR = "investment-calculator"
DATABASE = "property-database"
SEARCH = "real-estate-search"
CMA = "comparative-market-analysis"
INSIGHTS = "market-insights"
ANALYSIS = "property-investment-analysis"
ZONES = "opportunity-zone-analysis"


@dataclass(frozen=True)
class AgentDefinition:
    key: str
    display_name: str
    provider: str
    system_prompt: str
    tools: Tuple[str, ...] = ()
    max_steps: int = 3


DEFAULT_AGENTS: Tuple[AgentDefinition, ...] = (
    AgentDefinition(
        key="market-analyzer",
        display_name="Market Analyzer",
        provider="openai",
        system_prompt=prompts.MARKET_ANALYZER_PROMPT,
        tools=(DATABASE, SEARCH, INSIGHTS),
        max_steps=5,
    ),
    AgentDefinition(
        key="deal-finder",
        display_name="Deal Finder",
        provider="anthropic",
        system_prompt=prompts.DEAL_FINDER_PROMPT,
        tools=(DATABASE, SEARCH, CMA, ANALYSIS),
        max_steps=5,
    ),
    AgentDefinition(
        key="trend-predictor",
        display_name="Trend Predictor",
        provider="gemini",
        system_prompt=prompts.TREND_PREDICTOR_PROMPT,
        tools=(DATABASE, SEARCH, INSIGHTS),
        max_steps=3,
    ),
    AgentDefinition(
        key="investment-advisor",
        display_name="Investment Advisor",
        provider="openai",
        system_prompt=prompts.INVESTMENT_ADVISOR_PROMPT,
        tools=(CALCULATOR, DATABASE, SEARCH, ANALYSIS),
        max_steps=5,
    ),
    AgentDefinition(
        key="neighborhood-analyst",
        display_name="Neighborhood Analyst",
        provider="anthropic",
        system_prompt=prompts.NEIGHBORHOOD_ANALYST_PROMPT,
        tools=(SEARCH, DATABASE, INSIGHTS),
        max_steps=3,
    ),
    AgentDefinition(
        key="cma-specialist",
        display_name="CMA Specialist",
        provider="openai",
        system_prompt=prompts.CMA_SPECIALIST_PROMPT,
        tools=(CMA, DATABASE),
        max_steps=3,
    ),
    AgentDefinition(
        key="opportunity-finder",
        display_name="Opportunity Finder",
        provider="anthropic",
        system_prompt=prompts.OPPORTUNITY_FINDER_PROMPT,
        tools=(ZONES, INSIGHTS, DATABASE),
        max_steps=4,
    ),
    AgentDefinition(
        key="investment-strategist",
        display_name="Investment Strategist",
        provider="openai",
        system_prompt=prompts.INVESTMENT_STRATEGIST_PROMPT,
        tools=(INSIGHTS, ANALYSIS, ZONES, CALCULATOR),
        max_steps=5,
    ),
)


class AgentRegistry:
    """Immutable lookup of agent definitions by key"""

    def __init__(self, agents: Optional[Iterable[AgentDefinition]] = None):
        self._agents: Dict[str, AgentDefinition] = {
            agent.key: agent for agent in (agents if agents is not None else DEFAULT_AGENTS)
        }

    def __contains__(self, key: str) -> bool:
        return key in self._agents

    def keys(self) -> List[str]:
        return list(self._agents)

    def get(self, key: str) -> AgentDefinition:
        """
        Raises:
            AgentNotFound: key is not registered
        """
        agent = self._agents.get(key)
        if agent is None:
            raise AgentNotFound(key)
        return agent
