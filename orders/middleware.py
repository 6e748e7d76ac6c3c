"""Middleware that assigns and propagates a request identifier.

Every incoming HTTP request receives a request identifier. The identifier is
read from the incoming ``X-Request-ID`` header when provided by the client,
or generated server-side otherwise. It is stored on ``request.state`` and in
a context variable so log records emitted downstream can be correlated
without passing the value explicitly.

Behavior contract:
- If the incoming request contains the ``X-Request-ID`` header, that value
  is reused as the request id.
- Otherwise a new UUIDv4 is generated.
- The response will include the same id in the ``X-Request-ID`` header.
"""

import contextvars
import logging
import uuid

from fastapi import Request

REQUEST_ID_CTX = contextvars.ContextVar("request_id", default="-")
REQUEST_ID_HEADER = "X-Request-ID"

logger = logging.getLogger("orders.http")


async def add_request_id(request: Request, call_next):
    rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    request.state.request_id = rid
    token = REQUEST_ID_CTX.set(rid)
    try:
        response = await call_next(request)
    finally:
        logger.info("request handled", extra={"path": request.url.path, "method": request.method})
        REQUEST_ID_CTX.reset(token)
    response.headers[REQUEST_ID_HEADER] = rid
    return response
