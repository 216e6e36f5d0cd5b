"""Tests for the global error middleware and HTTP exception handler."""

from __future__ import annotations

from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from klaviyo_admin.middleware.error_handler import ErrorHandlerMiddleware, setup_exception_handlers


def test_unhandled_exception_becomes_json_500() -> None:
    app = FastAPI()
    app.add_middleware(ErrorHandlerMiddleware)

    @app.get("/explode")
    async def explode():
        raise RuntimeError("kaboom")

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/explode")

    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error", "details": "kaboom"}


def _app_with_handlers() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/shaped")
    async def shaped():
        raise HTTPException(status_code=502, detail={"message": "Upstream failed", "details": "boom"})

    @app.get("/plain")
    async def plain():
        raise HTTPException(status_code=404, detail="Not here")

    return app


def test_dict_detail_is_the_response_body() -> None:
    with TestClient(_app_with_handlers()) as client:
        response = client.get("/shaped")

    assert response.status_code == 502
    assert response.json() == {"message": "Upstream failed", "details": "boom"}


def test_string_detail_keeps_default_shape() -> None:
    with TestClient(_app_with_handlers()) as client:
        plain = client.get("/plain")
        missing = client.get("/nowhere")

    assert plain.status_code == 404
    assert plain.json() == {"detail": "Not here"}
    assert missing.status_code == 404
    assert missing.json() == {"detail": "Not Found"}
