from __future__ import annotations

import logging
import time
import uuid
from http import HTTPStatus
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles

from bundler.errors import ManifestNotFoundError
from bundler.logging_utils import maybe_enable_json_logging, reset_request_id, set_request_id
from bundler.metrics import export_prometheus, observe_request
from bundler.settings import BundlerSettings, get_settings
from bundler.templating import build_engine

from .routes.pages import router as pages_router


logger = logging.getLogger("bundler.app")

DEFAULT_STATIC_DIR = Path(__file__).resolve().parent / "static"


def _problem_payload(request: Request, status: int, detail: str) -> dict:
    try:
        title = HTTPStatus(status).phrase
    except ValueError:
        title = "Error"
    return {
        "type": "about:blank",
        "title": title,
        "status": status,
        "detail": detail,
        "instance": str(request.url.path),
        "request_id": request.headers.get("x-request-id") or getattr(request.state, "request_id", ""),
    }


def register_exception_handlers(application: FastAPI) -> None:
    async def manifest_not_found_handler(request: Request, exc: ManifestNotFoundError):
        logger.error("Bundle rendering failed for %s: %s", request.url.path, exc)
        content = _problem_payload(request, 500, f"bundle manifest not readable: {exc.manifest_path}")
        return JSONResponse(status_code=500, content=content, media_type="application/problem+json")

    application.add_exception_handler(ManifestNotFoundError, manifest_not_found_handler)


def create_app(settings: Optional[BundlerSettings] = None) -> FastAPI:
    maybe_enable_json_logging()
    settings = settings or get_settings()
    if settings.static_root is None and DEFAULT_STATIC_DIR.exists():
        settings = settings.model_copy(update={"static_root": DEFAULT_STATIC_DIR})

    application = FastAPI(title="Asset Bundler")
    application.state.settings = settings
    application.state.bundler = build_engine(settings)

    application.include_router(pages_router)
    register_exception_handlers(application)

    @application.get("/healthz", include_in_schema=False)
    def healthz():
        return {"ok": True, "caching": application.state.bundler.caching_enabled}

    @application.get("/metrics", include_in_schema=False)
    def metrics():
        return PlainTextResponse(export_prometheus(), media_type="text/plain; version=0.0.4; charset=utf-8")

    @application.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        t0 = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = getattr(response, "status_code", 200) or 200
        finally:
            dur = max(0.0, time.perf_counter() - t0)
            # prefer named route; fallback to path
            handler = getattr(request.scope.get("route"), "name", None) or request.url.path
            observe_request(str(handler), str(request.method), int(status), float(dur))
        return response

    @application.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = rid
        token = set_request_id(rid)
        try:
            resp = await call_next(request)
        finally:
            reset_request_id(token)
        resp.headers["X-Request-ID"] = rid
        return resp

    # Mounted last so the routes above take precedence over static files.
    static_root = settings.static_root
    if static_root is not None and Path(static_root).exists():
        mount_at = settings.static_url_base.rstrip("/") or "/"
        application.mount(mount_at, StaticFiles(directory=str(static_root)), name="static")

    return application


app = create_app()
