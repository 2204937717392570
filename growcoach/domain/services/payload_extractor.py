"""
Payload extraction from generator replies.

A coaching reply is expected to look like::

    <human readable coaching message>

    ---
    **State JSON:**
    {"stage": "goal", "user_goals": ["..."], ...}

The extractor isolates the first balanced JSON object, parses it, and
cleans up the text in front of it to obtain the message shown to the user.
Anything after the JSON object is ignored.
"""

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple

from ..exceptions import MalformedModelOutputError

logger = logging.getLogger(__name__)


class ScanState(Enum):
    """Lexical state of the brace scanner."""
    OUTSIDE_STRING = "outside_string"
    INSIDE_STRING = "inside_string"
    ESCAPE = "escape"


@dataclass(frozen=True)
class ExtractedPayload:
    """Message text and structured payload split out of one reply."""

    message: str
    payload: Dict[str, Any]
    raw_json: str


_HORIZONTAL_RULE = re.compile(r"^\s*(?:[-*_=]\s*){3,}$")
_CODE_FENCE = re.compile(r"^\s*```[\w-]*\s*$")
_STATE_JSON_LABEL = re.compile(
    r"[*_`#>\s]*state\s*json\s*[:：]?[*_`\s]*$",
    re.IGNORECASE
)
_BOLD_ASTERISK = re.compile(r"\*\*(.+?)\*\*", re.DOTALL)
_BOLD_UNDERSCORE = re.compile(r"__(.+?)__", re.DOTALL)


def find_balanced_span(text: str, start: int) -> Optional[int]:
    """
    Find the index just past the brace closing the one at ``start``.

    Braces inside JSON string literals are ignored, including escaped
    quotes. Returns None when the object never closes.
    """
    if start >= len(text) or text[start] != "{":
        return None

    state = ScanState.OUTSIDE_STRING
    depth = 0

    for index in range(start, len(text)):
        char = text[index]

        if state is ScanState.ESCAPE:
            state = ScanState.INSIDE_STRING
        elif state is ScanState.INSIDE_STRING:
            if char == "\\":
                state = ScanState.ESCAPE
            elif char == '"':
                state = ScanState.OUTSIDE_STRING
        else:
            if char == '"':
                state = ScanState.INSIDE_STRING
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return index + 1

    return None


def iter_json_spans(text: str) -> Iterator[Tuple[int, int]]:
    """Yield ``(start, end)`` of every balanced span, trying each ``{`` in order."""
    start = text.find("{")
    while start != -1:
        end = find_balanced_span(text, start)
        if end is not None:
            yield start, end
        start = text.find("{", start + 1)


def clean_message(text: str) -> str:
    """Strip trailing boilerplate and bold markup from the message part."""
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")

    changed = True
    while changed and lines:
        changed = False
        last = lines[-1]

        if not last.strip() or _HORIZONTAL_RULE.match(last) or _CODE_FENCE.match(last):
            lines.pop()
            changed = True
            continue

        stripped = _STATE_JSON_LABEL.sub("", last)
        if stripped != last:
            lines[-1] = stripped
            changed = True

    message = "\n".join(lines)
    message = _BOLD_ASTERISK.sub(r"\1", message)
    message = _BOLD_UNDERSCORE.sub(r"\1", message)
    return message.strip()


def extract_payload(text: Any) -> ExtractedPayload:
    """
    Split a generator reply into message and JSON payload.

    Raises:
        MalformedModelOutputError: no balanced JSON object, the object does
            not parse, or the message is empty after cleanup.
    """
    if not isinstance(text, str) or "{" not in text:
        raise MalformedModelOutputError("no JSON object in reply")

    found_span = False
    for start, end in iter_json_spans(text):
        found_span = True
        raw_json = text[start:end]
        try:
            payload = json.loads(raw_json)
        except (ValueError, RecursionError):
            logger.debug(f"Skipping unparseable brace span at offset {start}")
            continue
        if not isinstance(payload, dict):
            continue

        message = clean_message(text[:start])
        if not message:
            raise MalformedModelOutputError("empty coaching message")

        return ExtractedPayload(message=message, payload=payload, raw_json=raw_json)

    if not found_span:
        raise MalformedModelOutputError("unbalanced JSON object in reply")
    raise MalformedModelOutputError("JSON object in reply does not parse")
