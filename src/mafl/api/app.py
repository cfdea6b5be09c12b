"""FastAPI application factory for the dashboard config API.

Endpoints:
    GET  /health
    GET  /config                 persisted config, secrets stripped
    POST /config/reload          load config.yml again and persist it
    GET  /services/{service_id}  one indexed service, secrets stripped

The config is loaded and persisted once on startup; readers never trigger
a load themselves.
"""
from __future__ import annotations

import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from core import metrics
from core.config import (
    extract_safely_config,
    get_config,
    get_service,
    load_config,
    set_config,
)

logger = logging.getLogger("mafl.api")


async def _reload() -> dict:
    config = await load_config()
    set_config(config)
    if config.error:
        logger.error("Serving default config: %s", config.error)
    return extract_safely_config(config)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    await _reload()
    yield


def create_app() -> FastAPI:
    logging.basicConfig(
        level=os.getenv("MAFL_LOG_LEVEL", "info").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(
        title="Mafl API",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        lifespan=_lifespan,
    )

    # Dev CORS (UI dev server)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health():  # noqa: D401
        return {"status": "ok"}

    @app.get("/config")
    def config():  # noqa: D401
        cfg = get_config()
        if cfg is None:
            raise HTTPException(status_code=404, detail="Config not loaded")
        return extract_safely_config(cfg)

    @app.post("/config/reload")
    async def reload_config():  # noqa: D401
        metrics.inc("config_reload_requests_total")
        return await _reload()

    @app.get("/services/{service_id}")
    def service(service_id: str):  # noqa: D401
        item = get_service(service_id)
        if item is None:
            raise HTTPException(status_code=404, detail="Service not found")
        return extract_safely_config(item)

    @app.get("/metrics")
    def metrics_snapshot():  # noqa: D401
        return metrics.snapshot()

    @app.middleware("http")
    async def _metrics_mw(request: Request, call_next):  # noqa: D401
        start = time.time()
        labels = {"route": request.url.path, "method": request.method}
        response = await call_next(request)
        metrics.inc("api_request_total", labels)
        metrics.observe(
            "api_request_latency_ms", (time.time() - start) * 1000.0, labels
        )
        if response.status_code >= 400:
            metrics.inc(
                "api_request_errors_total",
                labels | {"status": response.status_code},
            )
        return response

    return app


app = create_app()


def main() -> None:  # pragma: no cover
    import uvicorn

    uvicorn.run("mafl.api.app:app", host="127.0.0.1", port=8000, reload=False)


if __name__ == "__main__":  # pragma: no cover
    main()
