"""
Agent Runner

Runs registered agents against their provider with the agent's tool subset.
Every run writes one entry to the agent log sink. Provider and generation
failures degrade to a fallback payload; only an unknown agent key raises.
"""

import asyncio
import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type

import structlog
from pydantic import BaseModel

from ..database.repository import ListingRepository
from ..providers.registry import ProviderRegistry
from ..utils.serialization import make_serializable, truncate
from .registry import AgentDefinition, AgentRegistry
from .tools import ToolSet

logger = structlog.get_logger(__name__)

FALLBACK_ANALYSIS_TEXT = """# AI Analysis Currently Unavailable

We're sorry, but the AI analysis is currently unavailable. This could be due to:

- Missing API keys
- Service disruption
- Configuration issues

Please try again later or contact support if the issue persists.

In the meantime, here are some general insights about real estate investment:

## General Investment Principles

1. Location is crucial - look for areas with strong economic indicators
2. Cash flow is king for rental properties
3. Consider long-term appreciation potential
4. Diversify your portfolio across different property types and locations
5. Always maintain adequate reserves for unexpected expenses

These general principles apply to most real estate investments, but for personalized advice, please try again when the AI service is available.
"""

STRUCTURED_FALLBACK = {
    'error': "AI service unavailable",
    'message': "The AI service is currently unavailable. Please try again later.",
}


# ============================================================================
# LOG SINKS
# ============================================================================

class AgentLogSink(ABC):
    """Destination for agent run records"""

    @abstractmethod
    async def record(self, entry: Dict[str, Any]) -> None:
        ...


class DatabaseAgentLogSink(AgentLogSink):
    """Writes run records to the ai_agent_logs table"""

    def __init__(self, repository: ListingRepository):
        self.repository = repository

    async def record(self, entry: Dict[str, Any]) -> None:
        await self.repository.insert_agent_log(entry)


class NullAgentLogSink(AgentLogSink):
    async def record(self, entry: Dict[str, Any]) -> None:
        return None


# ============================================================================
# RUNNER
# ============================================================================

class AgentRunner:
    """
    Usage:
        runner = AgentRunner(agents, providers, tools, log_sink)
        text = await runner.run_agent("market-analyzer", "How is Austin, TX trending?")
        results = await runner.run_agent_network({"deal-finder": "...", "trend-predictor": "..."})
    """

    def __init__(
        self,
        agents: AgentRegistry,
        providers: ProviderRegistry,
        tools: ToolSet,
        log_sink: Optional[AgentLogSink] = None
    ):
        self.agents = agents
        self.providers = providers
        self.tools = tools
        self.log_sink = log_sink if log_sink is not None else NullAgentLogSink()

    async def _log(
        self,
        agent: AgentDefinition,
        action_type: str,
        details: Dict[str, Any],
        success: bool,
        error_message: Optional[str] = None
    ) -> None:
        entry = {
            'agent_name': agent.display_name,
            'action_type': action_type,
            'details': details,
            'success': success,
            'error_message': error_message,
        }
        try:
            await self.log_sink.record(entry)
        except Exception as e:
            logger.warning("agent_log_write_failed", agent=agent.key, error=str(e))

    async def run_agent(self, agent_key: str, prompt: str) -> str:
        """
        Run one agent and return its answer text.

        Raises:
            AgentNotFound: agent_key is not registered (nothing is logged)
        """
        agent = self.agents.get(agent_key)
        logger.info("agent_run_started", agent=agent.key, provider=agent.provider)

        try:
            model = self.providers.resolve(agent.provider)
            text = await model.generate_text(
                agent.system_prompt,
                prompt,
                tools=self.tools.subset(agent.tools),
                max_steps=agent.max_steps,
            )
        except Exception as e:
            logger.error("agent_run_failed", agent=agent.key, provider=agent.provider, error=str(e))
            await self._log(agent, "generate", {'prompt': prompt, 'error': str(e)}, False, str(e))
            return FALLBACK_ANALYSIS_TEXT

        await self._log(agent, "generate", {'prompt': prompt, 'response': truncate(text)}, True)
        logger.info("agent_run_completed", agent=agent.key, response_length=len(text))
        return text

    async def run_agent_with_structured_output(
        self,
        agent_key: str,
        prompt: str,
        schema: Type[BaseModel]
    ) -> Dict[str, Any]:
        """
        Run one agent and return an object validated against `schema`, as a dict.

        On failure the returned dict is {'error': ..., 'message': ...}.

        Raises:
            AgentNotFound: agent_key is not registered
        """
        agent = self.agents.get(agent_key)
        logger.info("agent_structured_run_started", agent=agent.key, schema=schema.__name__)

        try:
            model = self.providers.resolve(agent.provider)
            result = await model.generate_object(
                agent.system_prompt,
                prompt,
                schema,
                tools=self.tools.subset(agent.tools),
                max_steps=agent.max_steps,
            )
        except Exception as e:
            logger.error("agent_structured_run_failed", agent=agent.key, provider=agent.provider, error=str(e))
            await self._log(agent, "generate_structured", {'prompt': prompt, 'error': str(e)}, False, str(e))
            return dict(STRUCTURED_FALLBACK)

        payload = make_serializable(result)
        await self._log(
            agent,
            "generate_structured",
            {'prompt': prompt, 'response': truncate(json.dumps(payload, default=str))},
            True,
        )
        return payload

    async def run_agent_network(self, prompts: Dict[str, str]) -> Dict[str, str]:
        """
        Run several agents concurrently. One agent's failure never affects another's slot.
        """
        keys: List[str] = list(prompts)
        outcomes = await asyncio.gather(
            *(self.run_agent(key, prompts[key]) for key in keys),
            return_exceptions=True,
        )

        results = {}
        for key, outcome in zip(keys, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning("agent_network_slot_failed", agent=key, error=str(outcome))
                results[key] = f"Error: {outcome}"
            else:
                results[key] = outcome
        return results
