"""
Model handle base class with the shared tool-calling loop.

Each vendor client only translates between its wire format and
ModelTurn / ToolCall; the loop itself lives here:

1. Send the conversation (with tool declarations when tools are bound)
2. If the model requested tools, execute every call and append the results
   (tool failures are returned to the model as {'error': ...})
3. Stop when the model answers without tool calls
4. After max_steps tool rounds, ask once more with tools disabled
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

import structlog
from pydantic import BaseModel

from ..utils.serialization import extract_json_object, make_serializable

logger = structlog.get_logger(__name__)

T = TypeVar('T', bound=BaseModel)

STRUCTURED_OUTPUT_INSTRUCTION = (
    "Respond with a single JSON object (no prose) that conforms to this JSON schema:\n{schema}"
)


@dataclass
class ToolCall:
    id: str
    name: str
    arguments: Dict[str, Any]


@dataclass
class ModelTurn:
    text: str = ""
    tool_calls: List[ToolCall] = field(default_factory=list)


class ModelHandle(ABC):
    """A configured model of one provider"""

    provider_id: str = "base"

    def __init__(self, model: str, temperature: float = 0.7, max_tokens: int = 4096):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    # ------------------------------------------------------------------
    # Vendor translation
    # ------------------------------------------------------------------

    @abstractmethod
    def _start_conversation(self, prompt: str) -> List[Any]:
        ...

    @abstractmethod
    async def _complete(
        self,
        system: str,
        conversation: List[Any],
        tool_schemas: Optional[List[Dict[str, Any]]],
        allow_tools: bool = True
    ) -> ModelTurn:
        ...

    @abstractmethod
    def _append_tool_round(
        self,
        conversation: List[Any],
        turn: ModelTurn,
        results: List[Tuple[ToolCall, Any]]
    ) -> None:
        ...

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def _run_tool(self, tools, call: ToolCall) -> Any:
        logger.info("executing_tool", provider=self.provider_id, tool=call.name, args=call.arguments)
        try:
            return make_serializable(await tools.execute(call.name, call.arguments))
        except Exception as e:
            logger.error("tool_execution_failed", provider=self.provider_id, tool=call.name, error=str(e))
            return {'error': str(e)}

    async def generate_text(self, system: str, prompt: str, tools=None, max_steps: int = 5) -> str:
        """
        Run the tool-calling loop and return the final answer text.

        Args:
            system: System prompt
            prompt: User prompt
            tools: ToolSet bound to the agent (None for no tools)
            max_steps: Tool-call rounds allowed before a final answer is forced
        """
        conversation = self._start_conversation(prompt)
        tool_schemas = tools.function_schemas() if tools else None

        for step in range(max_steps):
            turn = await self._complete(system, conversation, tool_schemas)
            if not turn.tool_calls:
                return turn.text

            logger.info("tool_calling_iteration", provider=self.provider_id, step=step + 1, max=max_steps,
                        calls=len(turn.tool_calls))
            results = [(call, await self._run_tool(tools, call)) for call in turn.tool_calls]
            self._append_tool_round(conversation, turn, results)

        if max_steps > 0:
            logger.warning("max_tool_iterations_reached", provider=self.provider_id, iterations=max_steps)
        final = await self._complete(system, conversation, tool_schemas, allow_tools=False)
        return final.text

    async def generate_object(
        self,
        system: str,
        prompt: str,
        schema: Type[T],
        tools=None,
        max_steps: int = 5
    ) -> T:
        """
        Generate an instance of `schema`.

        Raises:
            ValueError: the answer holds no JSON object
            pydantic.ValidationError: the object does not match the schema
        """
        instruction = STRUCTURED_OUTPUT_INSTRUCTION.format(schema=json.dumps(schema.model_json_schema()))
        text = await self.generate_text(f"{system}\n\n{instruction}", prompt, tools, max_steps)

        data = extract_json_object(text)
        if data is None:
            logger.warning("json_parse_failed", provider=self.provider_id, response_preview=text[:200])
            raise ValueError("Model response did not contain a JSON object")
        return schema.model_validate(data)


def to_json_text(value: Any) -> str:
    return json.dumps(value, default=str)
