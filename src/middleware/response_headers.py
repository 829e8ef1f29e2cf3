"""
Response shaping middleware: permissive CORS headers and JSON content type
"""

import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from config.settings import CORS_ALLOW_ORIGIN, CORS_ALLOW_METHODS, CORS_ALLOW_HEADERS

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": CORS_ALLOW_ORIGIN,
    "Access-Control-Allow-Methods": ", ".join(CORS_ALLOW_METHODS),
    "Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS),
}


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds CORS headers to every response

    OPTIONS requests on any path are answered here with a bare 200 and are
    never routed.
    """

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)

        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response


class JSONContentTypeMiddleware(BaseHTTPMiddleware):
    """Middleware that marks responses as JSON unless a handler chose another content type"""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("Content-Type", "application/json")
        return response
