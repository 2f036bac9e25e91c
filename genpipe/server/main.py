from __future__ import annotations

import logging
import logging.config
from typing import Optional

import uvicorn
from fastapi import FastAPI

from ..pipeline import Pipeline
from .api import router as api_router
from .middleware import add_cors
from .settings import Settings, settings as default_settings


def configure_logging(level: str = "INFO") -> None:
    # Application logging goes to stdout so it shows up in container logs
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": "%(asctime)s %(levelname)s [%(name)s] %(message)s"}
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {
            "uvicorn": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.error": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.access": {"handlers": ["default"], "level": level, "propagate": False},
            "genpipe": {"handlers": ["default"], "level": level, "propagate": False},
            "": {"handlers": ["default"], "level": "WARNING"},
        },
    })


def create_app(pipeline: Optional[Pipeline] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    app = FastAPI(title="genpipe flow server")
    # Registration happens here, before the first request is served
    app.state.pipeline = pipeline or Pipeline.from_settings(settings)
    app.include_router(api_router)

    @app.get("/healthz")
    async def healthz():
        return {"ok": True}

    add_cors(app, settings.CORS_ORIGINS)

    @app.on_event("shutdown")
    async def on_shutdown():
        await app.state.pipeline.aclose()

    return app


def serve(app: Optional[FastAPI] = None, port: Optional[int] = None, host: str = "127.0.0.1", settings: Optional[Settings] = None) -> None:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(app or create_app(settings=settings), host=host, port=port or settings.PORT, log_config=None)


if __name__ == "__main__":
    serve()
