"""Discovery of the models a server offers (``GET /v1/models``)."""

import logging

import httpx
from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI

from ..config import API_PREFIX, REQUEST_TIMEOUT_SECONDS
from .errors import RequestTimeoutError, ServerError, TransportError
from .models import resolve_url

logger = logging.getLogger(__name__)


async def list_models(
    server_base_url: str,
    api_key: str,
    *,
    http_client: httpx.AsyncClient | None = None,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
) -> list[str]:
    """List model identifiers available on a server.

    Args:
        server_base_url: Server base URL, e.g. ``http://localhost:1337``
        api_key: Bearer token; local servers usually accept any value
        http_client: Optional client to route requests through
        timeout: Request timeout in seconds

    Returns:
        Model identifiers in the order the server lists them

    Raises:
        InvalidEndpointError: If the server URL is malformed
        ServerError: If the server answers with an error status
        RequestTimeoutError: If the request times out
        TransportError: If the server cannot be reached
    """
    base_url = resolve_url(server_base_url, API_PREFIX)
    client = AsyncOpenAI(
        api_key=api_key or "none",
        base_url=str(base_url),
        timeout=timeout,
        max_retries=0,
        http_client=http_client,
    )

    try:
        models = [model.id async for model in client.models.list()]
    except APIStatusError as e:
        raise ServerError(e.status_code) from e
    except APITimeoutError as e:
        raise RequestTimeoutError() from e
    except APIConnectionError as e:
        raise TransportError() from e
    finally:
        if http_client is None:
            await client.close()

    logger.debug("Server %s offers %d model(s)", base_url, len(models))
    return models
