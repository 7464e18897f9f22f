"""Builders for fake server responses."""
import json

import httpx

SERVER_URL = "http://llm.test:1337"


def sse_line(content: str | None = None, **delta) -> str:
    """Build one ``data:`` line carrying a content delta."""
    if content is not None:
        delta["content"] = content
    return "data: " + json.dumps({"choices": [{"index": 0, "delta": delta}]})


def sse_body(*lines: str) -> bytes:
    """Join event lines into a response body, SSE style."""
    return "".join(f"{line}\n\n" for line in lines).encode()


def completion_body(content: str) -> dict:
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


def mock_client(handler) -> httpx.AsyncClient:
    """Create an httpx client whose requests are answered by *handler*."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
