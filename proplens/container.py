"""
Service container

Assembles every long-lived component from one Settings instance. The HTTP
app, the CLI and the tests all go through build_container() so there is no
module-level singleton besides get_settings().
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from .agent import AgentRegistry, AgentRunner, DatabaseAgentLogSink, InvestmentWorkflows, ToolSet, build_tool_set
from .agent.runner import AgentLogSink
from .config.settings import Settings
from .data_sources import MLSDataSource, RedfinDataSource, RepliersDataSource, ZillowDataSource
from .database import DatabaseManager, ListingRepository
from .providers import ProviderRegistry
from .services import RealEstateDataService, ResponseCache

logger = structlog.get_logger(__name__)


@dataclass
class Container:
    settings: Settings
    db: DatabaseManager
    repository: ListingRepository
    cache: ResponseCache
    data_service: RealEstateDataService
    providers: ProviderRegistry
    tools: ToolSet
    agents: AgentRegistry
    runner: AgentRunner
    workflows: InvestmentWorkflows

    async def start(self, create_tables: bool = False) -> None:
        await self.db.initialize()
        if create_tables:
            await self.db.create_tables()

    async def close(self) -> None:
        await self.data_service.close()
        await self.db.close()


def build_sources(settings: Settings):
    """External data providers in fallback order"""
    timeout = settings.EXTERNAL_API_TIMEOUT_SECONDS
    return [
        RepliersDataSource(
            settings.REPLIERS_API_KEY, settings.REPLIERS_BASE_URL, timeout=timeout, region=settings.REPLIERS_REGION
        ),
        RedfinDataSource(settings.REDFIN_API_KEY, settings.REDFIN_BASE_URL, timeout=timeout),
        ZillowDataSource(settings.ZILLOW_API_KEY, settings.ZILLOW_BASE_URL, timeout=timeout),
        MLSDataSource(settings.MLS_API_KEY, settings.MLS_BASE_URL, timeout=timeout),
    ]


def build_container(
    settings: Settings,
    db: Optional[DatabaseManager] = None,
    providers: Optional[ProviderRegistry] = None,
    sources=None,
    log_sink: Optional[AgentLogSink] = None,
    cache: Optional[ResponseCache] = None
) -> Container:
    db = db if db is not None else DatabaseManager(settings.DATABASE_URL, echo=settings.DEBUG)
    repository = ListingRepository(db)
    if cache is None:
        cache = ResponseCache(ttl_seconds=settings.CACHE_TTL_SECONDS, enabled=settings.ENABLE_CACHING)
    data_service = RealEstateDataService(
        settings,
        repository,
        cache,
        sources if sources is not None else build_sources(settings),
    )
    providers = providers if providers is not None else ProviderRegistry(settings)
    tools = build_tool_set(data_service, repository)
    agents = AgentRegistry()
    if log_sink is None:
        log_sink = DatabaseAgentLogSink(repository)
    runner = AgentRunner(agents, providers, tools, log_sink)
    workflows = InvestmentWorkflows(data_service, repository, runner, providers, tools)

    logger.info(
        "container_built",
        environment=settings.ENVIRONMENT,
        use_real_apis=settings.USE_REAL_APIS,
        providers=[b.provider_id for b in providers.bindings() if b.has_credential],
    )
    return Container(
        settings=settings,
        db=db,
        repository=repository,
        cache=cache,
        data_service=data_service,
        providers=providers,
        tools=tools,
        agents=agents,
        runner=runner,
        workflows=workflows,
    )
