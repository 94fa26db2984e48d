"""
Starlette / FastAPI integration for the publishing middleware.
"""

import logging
from typing import Any, Mapping, Optional, Union

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from kafka_middleware.config import MiddlewareConfig
from kafka_middleware.exceptions import PublishError
from kafka_middleware.middleware import PublishMiddleware, create_middleware
from kafka_middleware.resolvers import MessageGenerator

logger = logging.getLogger(__name__)


class KafkaPublishMiddleware(BaseHTTPMiddleware):
    """
    Publish one Kafka message per HTTP request.

    The downstream response is produced first so generators can inspect it.
    ``next()`` hands that response back to the host; ``next(error)`` raises
    PublishError, which the application's exception handlers answer.

    Usage:
        app.add_middleware(KafkaPublishMiddleware, config={"producer": {"topic": "requests"}})
    """

    def __init__(
        self,
        app: ASGIApp,
        config: Union[MiddlewareConfig, Mapping[str, Any], None] = None,
        *,
        handler: Optional[PublishMiddleware] = None,
        broker: Optional[Any] = None,
        message_generator: Optional[MessageGenerator] = None,
    ) -> None:
        super().__init__(app)
        if handler is None:
            handler = create_middleware(config, broker=broker, message_generator=message_generator)
        self.handler = handler

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)

        def proceed(error: Optional[Any] = None) -> Response:
            if error is not None:
                if isinstance(error, PublishError):
                    raise error
                raise PublishError(error) from (error if isinstance(error, BaseException) else None)
            return response

        return await self.handler(request, response, proceed)
