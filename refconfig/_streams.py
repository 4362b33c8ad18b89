"""Relay a child's output pipe to a text sink."""

from __future__ import annotations

import codecs
import typing as typ

if typ.TYPE_CHECKING:
    import asyncio

_READ_SIZE = 4096


async def _relay_stream(
    stream: asyncio.StreamReader,
    *,
    sink: typ.IO[str] | None,
    keep: bool,
    encoding: str,
    errors: str,
) -> str | None:
    """Decode ``stream`` until EOF, writing to ``sink`` and keeping the text.

    The decoder carries partial multi-byte sequences over read boundaries.
    Returns the decoded text when ``keep`` is set, else ``None``.
    """
    decoder = codecs.getincrementaldecoder(encoding)(errors=errors)
    kept: list[str] | None = [] if keep else None
    while chunk := await stream.read(_READ_SIZE):
        _emit(decoder.decode(chunk), sink, kept)
    _emit(decoder.decode(b"", final=True), sink, kept)
    return None if kept is None else "".join(kept)


def _emit(text: str, sink: typ.IO[str] | None, kept: list[str] | None) -> None:
    if not text:
        return
    if kept is not None:
        kept.append(text)
    if sink is not None:
        sink.write(text)
        sink.flush()
