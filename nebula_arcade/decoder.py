"""Decode raw model text into content items.

Models asked for JSON still wrap it in markdown fences now and then. The
fences are stripped by position (a leading ``` line, optionally tagged with a
language, and a trailing ```), then the rest must parse and validate. Any
failure raises MalformedResponse; nothing here returns None.
"""

from __future__ import annotations

import json
import logging
from typing import Any, TypeVar

from pydantic import ValidationError

from nebula_arcade.errors import MalformedResponse
from nebula_arcade.models import ContentItem

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=ContentItem)

_FENCE = "```"


def strip_fences(raw: str) -> str:
    text = raw.strip()
    if text.startswith(_FENCE):
        newline = text.find("\n")
        if newline == -1:
            # Single-line fence: ```json {...}```
            text = text[len(_FENCE):]
            tag_end = 0
            while tag_end < len(text) and text[tag_end].isalpha():
                tag_end += 1
            text = text[tag_end:]
        else:
            text = text[newline + 1:]
    if text.rstrip().endswith(_FENCE):
        text = text.rstrip()[: -len(_FENCE)]
    return text.strip()


def _parse(raw: str) -> Any:
    text = strip_fences(raw)
    if not text:
        raise MalformedResponse("Model returned an empty response")
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("model output is not valid JSON: %s", e)
        raise MalformedResponse(f"Model returned invalid JSON: {e}") from e


def _validate(data: Any, model: type[T]) -> T:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise MalformedResponse(
            f"Model output does not match {model.__name__}: {e.error_count()} error(s)"
        ) from e


def decode(raw: str, model: type[T]) -> T:
    data = _parse(raw)
    if not isinstance(data, dict):
        raise MalformedResponse(
            f"Expected a JSON object for {model.__name__}, got {type(data).__name__}"
        )
    return _validate(data, model)


def decode_batch(raw: str, model: type[T]) -> list[T]:
    """Decode a JSON array; one invalid element rejects the whole batch."""
    data = _parse(raw)
    if not isinstance(data, list):
        raise MalformedResponse(
            f"Expected a JSON array of {model.__name__}, got {type(data).__name__}"
        )
    return [_validate(element, model) for element in data]
