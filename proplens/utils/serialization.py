"""
Serialization helpers shared by the agent and aggregation layers.
"""

import hashlib
import json
import random
import re
from datetime import datetime, date
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel


def make_serializable(obj: Any) -> Any:
    """Convert objects to JSON-serializable format (Decimal, datetime, models, nested structures)."""
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    elif isinstance(obj, Decimal):
        return float(obj)
    elif isinstance(obj, (datetime, date)):
        return obj.isoformat()
    elif isinstance(obj, dict):
        return {key: make_serializable(value) for key, value in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [make_serializable(item) for item in obj]
    elif hasattr(obj, '__dict__'):
        return make_serializable(
            {k: v for k, v in obj.__dict__.items() if not k.startswith('_')}
        )
    else:
        return obj


def cache_key(method: str, params: Any) -> str:
    """Key of a memoized call: method name plus canonical JSON of its parameters."""
    payload = json.dumps(make_serializable(params), sort_keys=True, default=str)
    return f"{method}:{payload}"


def seeded_rng(seed_text: str) -> random.Random:
    """Pseudo-random generator keyed by text so synthetic data is reproducible."""
    digest = hashlib.sha256(seed_text.encode('utf-8')).hexdigest()
    return random.Random(int(digest[:16], 16))


def truncate(text: str, limit: int = 500) -> str:
    return text[:limit] + "..."


def extract_json_object(response_text: str) -> Optional[Dict[str, Any]]:
    """
    Pull a JSON object out of model output.

    Tries the whole text, then a fenced code block, then the widest {...} span.
    """
    text = (response_text or "").strip()
    try:
        result = json.loads(text)
        if isinstance(result, dict):
            return result
    except json.JSONDecodeError:
        pass

    code_block_match = re.search(r'```(?:json)?\s*(\{.*?\})\s*```', text, re.DOTALL)
    if code_block_match:
        try:
            return json.loads(code_block_match.group(1))
        except json.JSONDecodeError:
            pass

    json_match = re.search(r'\{.*\}', text, re.DOTALL)
    if json_match:
        try:
            return json.loads(json_match.group())
        except json.JSONDecodeError:
            pass

    return None
