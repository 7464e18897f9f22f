"""Decoding of server-sent-event lines from a streaming completion."""

import logging

from pydantic import ValidationError

from ..config import DATA_PREFIX, DONE_SENTINEL
from .models import StreamChunk, StreamDelta

logger = logging.getLogger(__name__)


def parse_line(raw_line: str) -> StreamDelta | None:
    """Decode one line of an event stream.

    Args:
        raw_line: A single line of the response body, without its newline

    Returns:
        A terminal delta for ``data: [DONE]``, a delta carrying the first
        choice's content fragment (possibly None) for a decodable chunk, or
        None when the line should be skipped. Lines without the ``data: ``
        prefix and chunks that fail to decode are skipped.
    """
    if not raw_line.startswith(DATA_PREFIX):
        return None

    payload = raw_line[len(DATA_PREFIX):].strip()
    if payload == DONE_SENTINEL:
        return StreamDelta(is_terminal=True)

    try:
        chunk = StreamChunk.model_validate_json(payload)
    except ValidationError:
        # Isolated malformed chunks are dropped; the stream carries on
        logger.debug("Skipping undecodable stream chunk: %.200s", payload)
        return None

    if not chunk.choices or chunk.choices[0].delta is None:
        return StreamDelta()
    return StreamDelta(content_fragment=chunk.choices[0].delta.content)
