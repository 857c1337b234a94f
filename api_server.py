from __future__ import annotations  # FastAPI server exposing the practice session API

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import router
from coaching_agent import bind_with_config
from config.settings import settings
from services.costs import record_usage
from services.errors import PracticeError
from storage.migrate import migrate

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):  # Prepare storage and bind coaching routes
    migrate(settings.DB_PATH)
    config_path = Path(settings.APP_CONFIG_PATH)
    if config_path.exists():
        bind_with_config(config_path, usage_hook=record_usage)
    else:
        logger.warning("App config %s not found; coaching models are unbound", config_path)
    yield


app = FastAPI(title="Practice Interview Coaching API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)


@app.exception_handler(PracticeError)
async def practice_error_handler(_: Request, exc: PracticeError) -> JSONResponse:  # Map domain errors to status codes
    if exc.status_code >= 500:
        logger.error("Request failed: %s", exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:  # Malformed bodies are client errors
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


app.include_router(router)
