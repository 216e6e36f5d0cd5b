"""CORS middleware configuration"""
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Dict, Sequence

from klaviyo_admin.config import get_settings

CORS_PATHS = ("/api/profiles",)


def cors_headers(origin: str, allowed_origins: Sequence[str]) -> Dict[str, str]:
    """
    Cross-origin headers for a request

    The request origin is echoed back only when it is allow-listed; any
    other origin gets the first allow-listed one.
    """
    if origin and origin in allowed_origins:
        allow_origin = origin
    else:
        allow_origin = allowed_origins[0] if allowed_origins else ""

    headers = {
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type, Authorization",
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Max-Age": "86400",
        "Vary": "Origin",
    }
    if allow_origin:
        headers["Access-Control-Allow-Origin"] = allow_origin
    return headers


class AllowListCorsMiddleware(BaseHTTPMiddleware):
    """Answer preflights and decorate responses on the profile endpoints"""

    def __init__(self, app, allowed_origins: Sequence[str], paths: Sequence[str] = CORS_PATHS):
        super().__init__(app)
        self.allowed_origins = list(allowed_origins)
        self.paths = tuple(p.rstrip("/") for p in paths)

    def _applies(self, path: str) -> bool:
        return path.rstrip("/") in self.paths

    async def dispatch(self, request: Request, call_next):
        if not self._applies(request.url.path):
            return await call_next(request)

        headers = cors_headers(request.headers.get("origin", ""), self.allowed_origins)

        if request.method == "OPTIONS":
            return Response(status_code=204, headers=headers)

        response = await call_next(request)
        response.headers.update(headers)
        return response


def setup_cors(app):
    """
    Configure CORS middleware for the application

    Args:
        app: FastAPI application instance
    """
    settings = get_settings()
    app.add_middleware(
        AllowListCorsMiddleware,
        allowed_origins=settings.cors_origins,
    )
