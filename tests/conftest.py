"""Shared fixtures: SQLite-backed container with fake providers, sources and log sinks."""

import random
from typing import Any, Dict, List, Optional

import pytest

from proplens.config.settings import Settings
from proplens.container import build_container
from proplens.data_sources.base import SEARCH, TRENDS, ExternalDataSource
from proplens.database import DatabaseManager, Listing
from proplens.database.sample_data import generate_listings
from proplens.providers import ModelHandle, ModelTurn, ProviderRegistry
from proplens.agent.runner import AgentLogSink


class FakeModel(ModelHandle):
    """Replays scripted turns; records every request it receives."""

    provider_id = "fake"

    def __init__(self, turns: Optional[List[ModelTurn]] = None, error: Optional[Exception] = None):
        super().__init__("fake-model")
        self.turns = list(turns or [])
        self.error = error
        self.requests: List[Dict[str, Any]] = []

    def _start_conversation(self, prompt):
        return [{"role": "user", "content": prompt}]

    async def _complete(self, system, conversation, tool_schemas, allow_tools=True):
        self.requests.append({
            "system": system,
            "conversation": list(conversation),
            "tools": [s["name"] for s in tool_schemas or []],
            "allow_tools": allow_tools,
        })
        if self.error is not None:
            raise self.error
        if self.turns:
            return self.turns.pop(0)
        return ModelTurn(text="done")

    def _append_tool_round(self, conversation, turn, results):
        conversation.append({"role": "assistant", "tool_calls": [c.name for c in turn.tool_calls]})
        for call, result in results:
            conversation.append({"role": "tool", "name": call.name, "result": result})


def fake_factories(models: Dict[str, ModelHandle]):
    return {
        provider_id: (lambda api_key, binding, settings, model=model: model)
        for provider_id, model in models.items()
    }


class RecordingSink(AgentLogSink):
    def __init__(self):
        self.entries: List[Dict[str, Any]] = []

    async def record(self, entry):
        self.entries.append(entry)


class FailingSink(AgentLogSink):
    async def record(self, entry):
        raise RuntimeError("log store offline")


class FakeSource(ExternalDataSource):
    """External provider double with call counting and scripted results."""

    def __init__(self, name: str, capabilities, results: Optional[Dict[str, Any]] = None, api_key: str = "key"):
        super().__init__(api_key, f"https://{name}.test")
        self.name = name
        self.capabilities = frozenset(capabilities)
        self.results = results or {}
        self.calls: Dict[str, int] = {}

    def _answer(self, method):
        self.calls[method] = self.calls.get(method, 0) + 1
        result = self.results.get(method)
        if isinstance(result, Exception):
            raise result
        return result

    async def search_properties(self, params):
        return self._answer("search_properties")

    async def get_market_trends(self, region, region_type=None, months=12):
        return self._answer("get_market_trends")

    async def get_market_insights(self, region, region_type=None):
        return self._answer("get_market_insights")


def make_listing(**overrides) -> Listing:
    values = dict(
        address="100 Main St",
        city="Austin",
        state="TX",
        zip_code="78701",
        price=400000,
        bedrooms=3,
        bathrooms=2,
        square_feet=2000,
        year_built=2005,
        property_type="residential",
        listing_status="active",
        deal_score=8,
        deal_reasons=[],
    )
    values.update(overrides)
    return Listing(**values)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'proplens.db'}",
        OPENAI_API_KEY="",
        ANTHROPIC_API_KEY="",
        GEMINI_API_KEY="",
        USE_REAL_APIS=False,
        ENABLE_CACHING=True,
    )


@pytest.fixture
async def db(anyio_backend, settings):
    manager = DatabaseManager(settings.DATABASE_URL)
    await manager.initialize()
    await manager.create_tables()
    yield manager
    await manager.close()


@pytest.fixture
def models() -> Dict[str, FakeModel]:
    return {"openai": FakeModel(), "anthropic": FakeModel(), "gemini": FakeModel()}


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def keyed_settings(settings) -> Settings:
    return settings.model_copy(update={
        "OPENAI_API_KEY": "test-openai",
        "ANTHROPIC_API_KEY": "test-anthropic",
        "GEMINI_API_KEY": "test-gemini",
    })


@pytest.fixture
def container(keyed_settings, db, models, sink):
    """Credentials present for every provider; each resolves to a FakeModel"""
    providers = ProviderRegistry(keyed_settings, factories=fake_factories(models))
    return build_container(keyed_settings, db=db, providers=providers, sources=[], log_sink=sink)


@pytest.fixture
async def seeded(anyio_backend, container):
    """50 reproducible sample listings"""
    listings = generate_listings(50, random.Random(7))
    await container.repository.add_all(listings)
    return listings
