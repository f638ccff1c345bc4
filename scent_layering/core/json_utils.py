"""Recover JSON documents from chat-completion replies.

Models wrap their JSON in reasoning blocks, code fences or chatty prose; these
helpers peel that away before decoding.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterator

from .exceptions import ScentLayeringError

REASONING_PATTERN = re.compile(r"<think>.*?</think>", flags=re.DOTALL | re.IGNORECASE)
FENCE_PATTERN = re.compile(r"```(?:json)?\s*(.*?)```", flags=re.DOTALL | re.IGNORECASE)

_DECODER = json.JSONDecoder()


def unwrap_reply(content: str) -> str:
    """Drop reasoning blocks and return the body of the first code fence, if any."""
    text = REASONING_PATTERN.sub("", content or "").strip()
    fenced = FENCE_PATTERN.search(text)
    return (fenced.group(1) if fenced else text).strip()


def _document_starts(text: str) -> Iterator[str]:
    for index, char in enumerate(text):
        if char in "{[":
            yield text[index:]


def parse_json_response(content: str) -> Any:
    """Return the first object or array found in a chat completion body.

    Anything after the document is ignored. Raises ScentLayeringError when no
    candidate decodes.
    """
    for candidate in _document_starts(unwrap_reply(content)):
        try:
            document, _ = _DECODER.raw_decode(candidate)
        except json.JSONDecodeError:
            continue
        return document
    raise ScentLayeringError("Unable to parse JSON from response")
