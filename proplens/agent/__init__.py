"""Specialist agents, their tools and composite investment workflows"""

from .registry import AgentDefinition, AgentRegistry
from .runner import AgentRunner, AgentLogSink, DatabaseAgentLogSink, NullAgentLogSink, FALLBACK_ANALYSIS_TEXT
from .tools import ToolDefinition, ToolSet, build_tool_set
from .workflows import InvestmentWorkflows, StrategyRequest

__all__ = [
    'AgentDefinition',
    'AgentRegistry',
    'AgentRunner',
    'AgentLogSink',
    'DatabaseAgentLogSink',
    'NullAgentLogSink',
    'FALLBACK_ANALYSIS_TEXT',
    'ToolDefinition',
    'ToolSet',
    'build_tool_set',
    'InvestmentWorkflows',
    'StrategyRequest',
]
