"""
FastAPI application entry point for the drawings API.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from excaliapp.backend.routes import router
from excaliapp.config import get_settings

logger = logging.getLogger(__name__)


async def _bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


async def _internal_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Error in %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error.", "error": str(exc)},
    )


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Excaliapp Drawings API", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, _bad_request)
    app.add_exception_handler(Exception, _internal_error)
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
