"""
dirzip HTTP application

Small FastAPI service around the archive engine:

    - GET  /health           liveness probe
    - POST /api/v1/archive   ZIP download of a directory under serve_root

Configuration comes from load_config() (DIRZIP_* environment variables)
unless a ZipDirConfig is passed to create_app().
"""

from __future__ import annotations

import json
import logging
import time
import traceback
from typing import Any, Optional

from fastapi import FastAPI
from starlette.requests import Request

from .api import router
from .config import ZipDirConfig, configure_logging, load_config

logger = logging.getLogger(__name__)


def _log(msg: str, **extra: Any) -> None:
    """
    Centralised structured logging.

    All request logs go through here as one JSON object per line.
    """
    logger.info(json.dumps({"msg": msg, **extra}, ensure_ascii=False, default=str))


def create_app(config: Optional[ZipDirConfig] = None) -> FastAPI:
    cfg = config or load_config()
    configure_logging(cfg)

    app = FastAPI(title="dirzip", version="0.1.0")
    app.state.config = cfg

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        _log("[http] request", method=request.method, path=request.url.path)
        try:
            resp = await call_next(request)
        except Exception as exc:
            _log("[http] error", error=str(exc), traceback=traceback.format_exc())
            raise
        _log(
            "[http] response",
            path=request.url.path,
            duration_ms=int((time.time() - start) * 1000),
            status_code=getattr(resp, "status_code", None),
        )
        return resp

    @app.get("/health")
    async def health():
        return {"status": "ok", "time": time.time()}

    app.include_router(router)
    return app


__all__ = ["create_app"]
