"""
Default message describing an intercepted request/response exchange.
"""

import time
from typing import Any, Dict, Optional

from kafka_middleware.config import MiddlewareConfig


def _client_host(request: Any) -> Optional[str]:
    client = getattr(request, "client", None)
    if client is None:
        return None
    return getattr(client, "host", None) or str(client)


async def generate(config: MiddlewareConfig, request: Any, response: Any) -> Dict[str, Any]:
    """
    Describe the exchange as a JSON-friendly dict.

    Attributes are read duck-typed so any request/response pair works; Starlette
    objects provide all of them.

    Args:
        config: Middleware configuration
        request: Intercepted request
        response: Response produced downstream, may be None

    Returns:
        Message with timestamp, method, url, path, query, headers, client and status_code
    """
    url = getattr(request, "url", None)
    query = getattr(request, "query_params", None)
    headers = getattr(request, "headers", None)

    return {
        "timestamp": int(time.time() * 1000),
        "topic": config.producer.topic,
        "method": getattr(request, "method", None),
        "url": str(url) if url is not None else None,
        "path": getattr(url, "path", None),
        "query": dict(query) if query is not None else {},
        "headers": dict(headers) if headers is not None else {},
        "client": _client_host(request),
        "status_code": getattr(response, "status_code", None),
    }
