"""Reassembly of notification fragments into JSON messages.

The sensor streams its replies over a BLE notify characteristic with no
length prefix or delimiter; a single reply is often split across several
notifications. A message is complete as soon as the accumulated bytes
parse as one JSON document.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from typing import NoReturn

from pyawairble.exceptions import AwairBufferOverflowError, AwairMalformedMessageError
from pyawairble.models.messages import DecodedMessage

_logger = logging.getLogger(__name__)

_DOCUMENT_START = "{["
_JSON_WHITESPACE = " \t\r\n"


class FragmentReassembler:
    """Accumulates raw fragments and yields complete :class:`DecodedMessage` objects.

    Behaviour:

    * A buffer is decoded once; an object takes precedence, an array of
      objects is the alternative. The same bytes never produce two messages.
    * Bytes that do not yet form a document (including a multi-byte UTF-8
      character cut at a fragment boundary) stay buffered without error.
    * Several documents in one buffer are emitted in order. Bytes after the
      last complete document stay buffered as the start of the next one.
    * Bytes that can never become a message are discarded and reported
      with :class:`AwairMalformedMessageError`.
    * With ``max_buffer_bytes`` set, a buffer that outgrows it is discarded
      and reported with :class:`AwairBufferOverflowError`. Without it the
      buffer is unbounded.

    Not thread-safe; owned by a single consumer.
    """

    def __init__(self, *, max_buffer_bytes: int | None = None) -> None:
        self._buffer = bytearray()
        self._max_buffer_bytes = max_buffer_bytes
        self._decoder = json.JSONDecoder()

    @property
    def pending(self) -> int:
        """Number of bytes buffered towards the next message."""
        return len(self._buffer)

    def reset(self) -> None:
        self._buffer.clear()

    def feed(self, fragment: bytes) -> Iterator[DecodedMessage]:
        """Append *fragment* and return an iterator over completed messages.

        The fragment is buffered immediately; iterate the result to
        completion to decode it. A malformed buffer raises while iterating,
        after any messages that preceded it were yielded.
        """
        self._buffer.extend(fragment)
        limit = self._max_buffer_bytes
        if limit is not None and len(self._buffer) > limit:
            size = len(self._buffer)
            self._buffer.clear()
            _logger.warning("Discarding %d buffered bytes (limit %d)", size, limit)
            raise AwairBufferOverflowError(
                f"Pending buffer exceeded {limit} bytes ({size} buffered)",
                limit=limit,
                size=size,
            )
        return self._drain()

    def _drain(self) -> Iterator[DecodedMessage]:
        while self._buffer:
            text, tail = self._decode_complete_chars()
            text = text.lstrip(_JSON_WHITESPACE)
            if not text:
                self._buffer = bytearray(tail)
                return
            if text[0] not in _DOCUMENT_START:
                self._discard(f"unexpected leading character {text[0]!r}")

            try:
                value, end = self._decoder.raw_decode(text)
            except json.JSONDecodeError:
                # Incomplete; wait for more fragments.
                return

            message = DecodedMessage.from_json(value)
            if message is None:
                self._discard("array contains non-object elements")

            self._buffer = bytearray(text[end:].encode("utf-8") + tail)
            _logger.debug("Decoded %s message, %d bytes left buffered", message.kind, len(self._buffer))
            yield message

    def _decode_complete_chars(self) -> tuple[str, bytes]:
        """Decode the buffer, holding back a multi-byte character cut at its end."""
        try:
            return self._buffer.decode("utf-8"), b""
        except UnicodeDecodeError as exc:
            if exc.end == len(self._buffer) and exc.reason == "unexpected end of data":
                return self._buffer[: exc.start].decode("utf-8"), bytes(self._buffer[exc.start :])
            self._discard(f"invalid UTF-8 at offset {exc.start}")

    def _discard(self, reason: str) -> NoReturn:
        size = len(self._buffer)
        preview = bytes(self._buffer[:64])
        self._buffer.clear()
        _logger.warning("Discarding %d unparseable bytes (%s): %r", size, reason, preview)
        raise AwairMalformedMessageError(f"Discarded {size} bytes that can never form a message: {reason}")
