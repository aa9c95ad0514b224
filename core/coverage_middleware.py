import json
import logging
from typing import Any, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from core.hit_recorder import HitRecorder

logger = logging.getLogger(__name__)


class CoverageMiddleware(BaseHTTPMiddleware):
    """
    Records every request of an application under test into a HitRecorder.

    Usage:
        app.add_middleware(CoverageMiddleware, recorder=recorder)
    """

    def __init__(self, app: ASGIApp, recorder: HitRecorder):
        super().__init__(app)
        self.recorder = recorder

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        body = await _read_json_body(request)
        self.recorder.record_call(
            method=request.method,
            url=request.url.path,
            body=body,
            query=list(request.query_params.keys()),
        )
        return await call_next(request)


async def _read_json_body(request: Request) -> Optional[Any]:
    if "json" not in request.headers.get("content-type", ""):
        return None
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.debug(f"Ignoring non-JSON body of {request.method} {request.url.path}")
        return None
