import pytest
from pydantic import BaseModel

from proplens.agent import FALLBACK_ANALYSIS_TEXT, AgentRunner, DatabaseAgentLogSink
from proplens.exceptions import AgentNotFound, ProviderUnavailable
from proplens.providers import ModelTurn, ProviderRegistry, ToolCall

from .conftest import FailingSink, fake_factories

pytestmark = pytest.mark.anyio


class Verdict(BaseModel):
    summary: str
    score: int


async def test_unknown_agent_raises_before_any_io(container, models, sink):
    with pytest.raises(AgentNotFound, match="Agent crystal-ball not found"):
        await container.runner.run_agent("crystal-ball", "hello")

    assert sink.entries == []
    assert all(not m.requests for m in models.values())


async def test_successful_run_is_logged(container, models, sink):
    models["openai"].turns = [ModelTurn(text="x" * 600)]

    text = await container.runner.run_agent("market-analyzer", "How is Austin?")

    assert text == "x" * 600
    assert len(sink.entries) == 1
    entry = sink.entries[0]
    assert entry['agent_name'] == "Market Analyzer"
    assert entry['action_type'] == "generate"
    assert entry['success'] is True
    assert entry['details']['response'] == "x" * 500 + "..."


async def test_agent_only_sees_its_tools(container, models):
    await container.runner.run_agent("cma-specialist", "Compare property 1")

    assert models["openai"].requests[0]['tools'] == ["comparative-market-analysis", "property-database"]


async def test_trend_predictor_runs_on_gemini(container, models):
    await container.runner.run_agent("trend-predictor", "Where is Denver heading?")

    assert len(models["gemini"].requests) == 1
    assert models["openai"].requests == []


async def test_tool_results_are_fed_back(container, models):
    models["openai"].turns = [
        ModelTurn(tool_calls=[ToolCall(id="1", name="market-insights", arguments={"region": "Austin, TX"})]),
        ModelTurn(text="Austin is balanced"),
    ]

    text = await container.runner.run_agent("market-analyzer", "How is Austin?")

    assert text == "Austin is balanced"
    tool_message = models["openai"].requests[1]['conversation'][-1]
    assert tool_message['name'] == "market-insights"
    assert tool_message['result']['region'] == "Austin, TX"


async def test_tool_errors_go_back_to_the_model(container, models, sink):
    models["openai"].turns = [
        ModelTurn(tool_calls=[ToolCall(id="1", name="market-insights", arguments={"city": "Austin"})]),
        ModelTurn(text="recovered"),
    ]

    text = await container.runner.run_agent("market-analyzer", "How is Austin?")

    assert text == "recovered"
    assert 'error' in models["openai"].requests[1]['conversation'][-1]['result']
    assert sink.entries[0]['success'] is True


async def test_step_budget_forces_final_answer(container, models):
    looping = ModelTurn(tool_calls=[ToolCall(id="1", name="property-database", arguments={"query_type": "deals"})])
    models["openai"].turns = [looping, looping, looping, ModelTurn(text="forced")]

    text = await container.runner.run_agent("cma-specialist", "Find comps")

    requests = models["openai"].requests
    assert text == "forced"
    assert len(requests) == 4
    assert requests[-1]['allow_tools'] is False


async def test_generation_failure_returns_fallback(container, models, sink):
    models["anthropic"].error = RuntimeError("rate limited")

    text = await container.runner.run_agent("deal-finder", "Find deals")

    assert text == FALLBACK_ANALYSIS_TEXT
    assert sink.entries[0]['success'] is False
    assert sink.entries[0]['error_message'] == "rate limited"


async def test_missing_credential_returns_fallback(settings, container, models, sink):
    providers = ProviderRegistry(settings, factories=fake_factories(models))
    runner = AgentRunner(container.agents, providers, container.tools, sink)

    text = await runner.run_agent("market-analyzer", "How is Austin?")

    assert text == FALLBACK_ANALYSIS_TEXT
    assert "openai API key is not configured" in sink.entries[0]['error_message']
    assert models["openai"].requests == []


async def test_unknown_provider_is_unavailable(settings, models):
    providers = ProviderRegistry(settings, factories=fake_factories(models))

    with pytest.raises(ProviderUnavailable):
        providers.resolve("mistral")


async def test_log_sink_failure_is_discarded(container, models):
    models["openai"].turns = [ModelTurn(text="fine")]
    runner = AgentRunner(container.agents, container.providers, container.tools, FailingSink())

    assert await runner.run_agent("market-analyzer", "How is Austin?") == "fine"


async def test_structured_output(container, models, sink):
    models["openai"].turns = [ModelTurn(text='Here you go:\n```json\n{"summary": "buy", "score": 8}\n```')]

    result = await container.runner.run_agent_with_structured_output("investment-advisor", "Rate it", Verdict)

    assert result == {"summary": "buy", "score": 8}
    assert sink.entries[0]['action_type'] == "generate_structured"
    assert sink.entries[0]['success'] is True


async def test_structured_output_failure_logs_once(container, models, sink):
    models["openai"].turns = [ModelTurn(text="I cannot answer in JSON")]

    result = await container.runner.run_agent_with_structured_output("investment-advisor", "Rate it", Verdict)

    assert result['error'] == "AI service unavailable"
    assert 'message' in result
    assert len(sink.entries) == 1
    assert sink.entries[0]['success'] is False


async def test_structured_output_unknown_agent(container):
    with pytest.raises(AgentNotFound):
        await container.runner.run_agent_with_structured_output("crystal-ball", "Rate it", Verdict)


async def test_network_isolates_failures(container, models):
    models["openai"].turns = [ModelTurn(text="market ok")]
    models["anthropic"].error = RuntimeError("overloaded")

    results = await container.runner.run_agent_network({
        "market-analyzer": "a",
        "crystal-ball": "b",
        "deal-finder": "c",
    })

    assert results["market-analyzer"] == "market ok"
    assert results["crystal-ball"] == "Error: Agent crystal-ball not found"
    assert results["deal-finder"] == FALLBACK_ANALYSIS_TEXT


async def test_database_sink_persists_entries(container, models):
    models["anthropic"].error = RuntimeError("overloaded")
    runner = AgentRunner(
        container.agents, container.providers, container.tools, DatabaseAgentLogSink(container.repository)
    )

    await runner.run_agent("deal-finder", "Find deals")

    logs = await container.repository.list_agent_logs(agent_name="Deal Finder")
    assert len(logs) == 1
    assert logs[0].action_type == "generate"
    assert logs[0].success is False
    assert logs[0].details == {'prompt': "Find deals", 'error': "overloaded"}
