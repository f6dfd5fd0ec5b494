"""
Vendor model handles: OpenAI, Anthropic and Google Gemini.

Each class maps the shared tool-calling loop onto its SDK's message format.
"""

import json
from typing import Any, Dict, List, Optional, Tuple

import anthropic
import openai
import structlog
from google import genai
from google.genai import types

from .base import ModelHandle, ModelTurn, ToolCall, to_json_text

logger = structlog.get_logger(__name__)


def _parse_arguments(raw: Optional[str]) -> Dict[str, Any]:
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        # Passed through so tool validation reports it back to the model
        return {'unparsed_arguments': raw}
    return parsed if isinstance(parsed, dict) else {'arguments': parsed}


class OpenAIModel(ModelHandle):
    provider_id = "openai"

    def __init__(self, api_key: str, model: str = "gpt-4o", temperature: float = 0.7, max_tokens: int = 4096):
        super().__init__(model, temperature, max_tokens)
        self.client = openai.AsyncOpenAI(api_key=api_key)

    def _start_conversation(self, prompt: str) -> List[Any]:
        return [{"role": "user", "content": prompt}]

    async def _complete(self, system, conversation, tool_schemas, allow_tools=True) -> ModelTurn:
        params = {
            "model": self.model,
            "messages": [{"role": "system", "content": system}] + conversation,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        if tool_schemas:
            params["tools"] = [{"type": "function", "function": schema} for schema in tool_schemas]
            params["tool_choice"] = "auto" if allow_tools else "none"

        response = await self.client.chat.completions.create(**params)
        message = response.choices[0].message

        return ModelTurn(
            text=message.content or "",
            tool_calls=[
                ToolCall(id=call.id, name=call.function.name, arguments=_parse_arguments(call.function.arguments))
                for call in message.tool_calls or []
            ],
        )

    def _append_tool_round(self, conversation, turn, results: List[Tuple[ToolCall, Any]]) -> None:
        conversation.append({
            "role": "assistant",
            "content": turn.text or None,
            "tool_calls": [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": json.dumps(call.arguments)},
                }
                for call in turn.tool_calls
            ],
        })
        for call, result in results:
            conversation.append({"role": "tool", "tool_call_id": call.id, "content": to_json_text(result)})


class AnthropicModel(ModelHandle):
    provider_id = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-opus-20240229",
        temperature: float = 0.7,
        max_tokens: int = 4096
    ):
        super().__init__(model, temperature, max_tokens)
        self.client = anthropic.AsyncAnthropic(api_key=api_key)

    def _start_conversation(self, prompt: str) -> List[Any]:
        return [{"role": "user", "content": prompt}]

    async def _complete(self, system, conversation, tool_schemas, allow_tools=True) -> ModelTurn:
        params = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "system": system,
            "messages": conversation,
        }
        if tool_schemas:
            # tool declarations stay present while tool_use blocks are in the history
            params["tools"] = [
                {"name": s["name"], "description": s["description"], "input_schema": s["parameters"]}
                for s in tool_schemas
            ]
            params["tool_choice"] = {"type": "auto" if allow_tools else "none"}

        response = await self.client.messages.create(**params)

        turn = ModelTurn()
        for block in response.content or []:
            if block.type == "text":
                turn.text += block.text
            elif block.type == "tool_use":
                turn.tool_calls.append(ToolCall(id=block.id, name=block.name, arguments=dict(block.input or {})))
        return turn

    def _append_tool_round(self, conversation, turn, results: List[Tuple[ToolCall, Any]]) -> None:
        content = []
        if turn.text:
            content.append({"type": "text", "text": turn.text})
        content.extend(
            {"type": "tool_use", "id": call.id, "name": call.name, "input": call.arguments}
            for call in turn.tool_calls
        )
        conversation.append({"role": "assistant", "content": content})
        conversation.append({
            "role": "user",
            "content": [
                {
                    "type": "tool_result",
                    "tool_use_id": call.id,
                    "content": to_json_text(result),
                    "is_error": isinstance(result, dict) and set(result) == {"error"},
                }
                for call, result in results
            ],
        })


class GeminiModel(ModelHandle):
    provider_id = "gemini"

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash", temperature: float = 0.7, max_tokens: int = 4096):
        super().__init__(model, temperature, max_tokens)
        self.client = genai.Client(api_key=api_key)

    def _start_conversation(self, prompt: str) -> List[Any]:
        return [{'role': 'user', 'parts': [{'text': prompt}]}]

    async def _complete(self, system, conversation, tool_schemas, allow_tools=True) -> ModelTurn:
        config_args = {
            'system_instruction': system,
            'temperature': self.temperature,
            'max_output_tokens': self.max_tokens,
        }
        if tool_schemas:
            config_args['tools'] = [{"function_declarations": tool_schemas}]
            config_args['tool_config'] = types.ToolConfig(
                function_calling_config=types.FunctionCallingConfig(mode='AUTO' if allow_tools else 'NONE')
            )

        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=conversation,
            config=types.GenerateContentConfig(**config_args)
        )

        turn = ModelTurn()
        if response.candidates:
            content = response.candidates[0].content
            for part in (content.parts if content else None) or []:
                if part.function_call:
                    call = part.function_call
                    turn.tool_calls.append(ToolCall(
                        id=call.id or call.name,
                        name=call.name,
                        arguments=dict(call.args or {}),
                    ))
                elif part.text and not part.thought:
                    turn.text += part.text
        return turn

    def _append_tool_round(self, conversation, turn, results: List[Tuple[ToolCall, Any]]) -> None:
        conversation.append({
            'role': 'model',
            'parts': [{'function_call': {'name': call.name, 'args': call.arguments}} for call in turn.tool_calls]
        })
        conversation.append({
            'role': 'user',
            'parts': [
                {'function_response': {
                    'name': call.name,
                    'response': result if isinstance(result, dict) else {'result': result},
                }}
                for call, result in results
            ]
        })
