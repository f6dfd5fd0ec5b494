"""
Exception hierarchy for PropLens.

Only AgentNotFound and PropertyNotFound are meant to reach the route layer.
Everything else is recovered inside the core with a fallback value.
"""


class ProplensError(Exception):
    """Base class for all PropLens errors"""
    pass


class AgentNotFound(ProplensError):
    """Raised when an agent key is not registered"""

    def __init__(self, agent_key: str):
        self.agent_key = agent_key
        super().__init__(f"Agent {agent_key} not found")


class PropertyNotFound(ProplensError):
    """Raised when a subject property is missing from the listing store"""

    def __init__(self, property_id: str):
        self.property_id = property_id
        super().__init__(f"Property not found: {property_id}")


class ProviderUnavailable(ProplensError):
    """Raised when an LLM provider has no credential configured"""

    def __init__(self, provider_id: str, reason: str = "API key is not configured"):
        self.provider_id = provider_id
        super().__init__(f"{provider_id} {reason}")


class UpstreamError(ProplensError):
    """Raised when an external data provider returns a non-2xx or bad payload"""

    def __init__(self, source: str, message: str, status: int = None):
        self.source = source
        self.status = status
        prefix = f"{source} API error ({status})" if status else f"{source} API error"
        super().__init__(f"{prefix}: {message}")


class ToolNotFound(ProplensError):
    """Raised when a model requests a tool that is not bound"""
    pass


class ToolInputError(ProplensError):
    """Raised when tool input fails schema validation"""

    def __init__(self, tool_name: str, detail: str):
        self.tool_name = tool_name
        self.detail = detail
        super().__init__(f"Invalid input for tool {tool_name}: {detail}")
