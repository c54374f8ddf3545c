"""
Incremental decoder for OpenAI-style server-sent event streams.

Only ``data:`` lines are meaningful. A ``[DONE]`` payload ends the stream.
"""

from __future__ import annotations

import json
from typing import Any, Iterator, Optional

DATA_PREFIX = "data: "
DONE_PAYLOAD = "[DONE]"


class StreamDone(Exception):
    """Raised by the decoder when the terminal ``[DONE]`` event is seen."""


class SSEDecoder:
    """Turns arbitrary text chunks into parsed JSON event payloads.

    Lines that span chunk boundaries are held back until their newline
    arrives. Blank lines, comments and non-data fields are ignored, and a
    payload that is not valid JSON is skipped.
    """

    def __init__(self):
        self._buffer = ""

    def feed(self, text: str) -> Iterator[dict[str, Any]]:
        self._buffer += text
        *lines, self._buffer = self._buffer.split("\n")
        for line in lines:
            event = self._parse_line(line)
            if event is not None:
                yield event

    def flush(self) -> Iterator[dict[str, Any]]:
        """Parse whatever is left in the buffer once the connection closes."""
        line, self._buffer = self._buffer, ""
        event = self._parse_line(line)
        if event is not None:
            yield event

    def _parse_line(self, line: str) -> Optional[dict[str, Any]]:
        trimmed = line.strip()
        if not trimmed.startswith(DATA_PREFIX):
            return None

        data = trimmed[len(DATA_PREFIX):]
        if data == DONE_PAYLOAD:
            raise StreamDone()

        try:
            payload = json.loads(data)
        except json.JSONDecodeError:
            return None
        return payload if isinstance(payload, dict) else None


def extract_delta_content(payload: dict[str, Any]) -> str:
    """Return ``choices[0].delta.content`` or an empty string."""
    choices = payload.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return ""
    delta = choices[0].get("delta") or {}
    content = delta.get("content") if isinstance(delta, dict) else None
    return content if isinstance(content, str) else ""
