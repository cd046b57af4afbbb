#
# src/picotest_explorer/runner/decoder.py
#
"""
Incremental decoder for concatenated JSON output.

Test commands print a sequence of JSON documents on stdout with no separator
between them (e.g. `{"hook":"CASE_ENTER",...}{"hook":"CASE_LEAVE",...}`). The
decoder tracks nesting while respecting string and escape context, so a value
is handed to `json.loads` as soon as its closing token arrives, whatever the
chunk boundaries are.
"""

import codecs
import json
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

import structlog

from picotest_explorer.exceptions import StreamParseError
from picotest_explorer.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runner.decoder")

_OPENERS = {"{": "}", "[": "]"}
_CLOSERS = frozenset(_OPENERS.values())
_WHITESPACE = frozenset(" \t\r\n")


class ConcatJsonDecoder:
    """
    Splits a stream of text or bytes into whole JSON values.

    One instance decodes one stream: feed chunks with `feed()`, then call
    `close()` once the stream has ended.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._text_decoder = codecs.getincrementaldecoder(encoding)(errors="strict")
        self._pending: list[str] = []
        self._stack: list[str] = []
        self._in_value = False
        self._in_string = False
        self._escape = False
        self._closed = False
        self.values_decoded = 0

    @property
    def has_pending(self) -> bool:
        """True while a value has been started but not yet closed."""
        return self._in_value

    def feed(self, chunk: bytes | str) -> list[Any]:
        """
        Consumes a chunk and returns every value completed by it, in order.

        Raises:
            StreamParseError: On input that cannot be JSON.
        """
        if self._closed:
            raise StreamParseError("Cannot feed a closed decoder")
        if isinstance(chunk, bytes):
            try:
                text = self._text_decoder.decode(chunk)
            except UnicodeDecodeError as e:
                raise StreamParseError("Invalid text encoding in JSON stream", details=e) from e
        else:
            text = chunk
        return self._scan(text)

    def close(self) -> None:
        """
        Signals end of stream.

        Raises:
            StreamParseError: If a value was started but never completed.
        """
        if self._closed:
            return
        self._closed = True
        try:
            tail = self._text_decoder.decode(b"", final=True)
        except UnicodeDecodeError as e:
            raise StreamParseError("Truncated text encoding at end of JSON stream", details=e) from e
        if tail.strip() or self.has_pending:
            raise StreamParseError(
                "Truncated JSON stream: end of output reached inside a value"
            )

    def _scan(self, text: str) -> list[Any]:
        values: list[Any] = []
        start = 0 if self._in_value else None

        for index, char in enumerate(text):
            if not self._in_value:
                if char in _WHITESPACE:
                    continue
                if char in _OPENERS:
                    self._stack.append(_OPENERS[char])
                elif char == '"':
                    self._in_string = True
                else:
                    raise StreamParseError(
                        f"Unexpected character {char!r} between JSON values"
                    )
                self._in_value = True
                start = index
                continue

            if self._in_string:
                if self._escape:
                    self._escape = False
                elif char == "\\":
                    self._escape = True
                elif char == '"':
                    self._in_string = False
                    if not self._stack:
                        values.append(self._complete(text[start : index + 1]))
                continue

            if char == '"':
                self._in_string = True
            elif char in _OPENERS:
                self._stack.append(_OPENERS[char])
            elif char in _CLOSERS:
                expected = self._stack.pop()
                if char != expected:
                    raise StreamParseError(
                        f"Mismatched {char!r} in JSON stream, expected {expected!r}"
                    )
                if not self._stack:
                    values.append(self._complete(text[start : index + 1]))

        if self._in_value and start is not None:
            self._pending.append(text[start:])
        return values

    def _complete(self, tail: str) -> Any:
        document = "".join(self._pending) + tail
        self._pending = []
        self._in_value = False
        try:
            value = json.loads(document)
        except json.JSONDecodeError as e:
            raise StreamParseError(f"Malformed JSON value in stream: {e.msg}", details=e) from e
        self.values_decoded += 1
        return value


async def decode_stream(
    chunks: AsyncIterable[bytes],
    decoder: ConcatJsonDecoder | None = None,
) -> AsyncIterator[Any]:
    """
    Yields each JSON value from an async stream of byte chunks as soon as it closes.

    The decoder is closed at end of stream, so a truncated trailing value
    raises `StreamParseError` after every complete value has been yielded.
    """
    decoder = decoder or ConcatJsonDecoder()
    async for chunk in chunks:
        for value in decoder.feed(chunk):
            yield value
    decoder.close()
    log.debug("JSON stream ended", values_decoded=decoder.values_decoded)

# 🔼⚙️
