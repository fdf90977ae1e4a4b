"""Server-sent event framing for chat turns.

Event names: ``start``, ``reasoning``, ``text``, ``tool-call``, ``tool-result``,
``finish`` and ``error``. Every event carries a JSON object.
"""

import json
import re
from typing import Any

GENERIC_ERROR = "Oops, an error occurred!"

_WORD = re.compile(r"\S+\s+")


def emit_sse(event: str, data: dict[str, Any]) -> str:
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


class WordChunker:
    """Re-chunks streamed text so that each emitted piece ends on a word boundary."""

    def __init__(self) -> None:
        self._buffer = ""

    def push(self, delta: str) -> list[str]:
        self._buffer += delta
        chunks = []
        while match := _WORD.search(self._buffer):
            chunks.append(self._buffer[: match.end()])
            self._buffer = self._buffer[match.end():]
        return chunks

    def flush(self) -> list[str]:
        rest, self._buffer = self._buffer, ""
        return [rest] if rest else []
