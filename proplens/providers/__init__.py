"""LLM provider handles and the registry that gates them on credentials"""

from .base import ModelHandle, ModelTurn, ToolCall
from .registry import ProviderBinding, ProviderRegistry

__all__ = ['ModelHandle', 'ModelTurn', 'ToolCall', 'ProviderBinding', 'ProviderRegistry']
