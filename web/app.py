"""
Production Scheduler - FastAPI Web Backend
"""

import json
import logging
import os
import sys
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from production_scheduler import __version__
from production_scheduler.config import (
    EngineConfig,
    load_config,
    configure_logging,
    CONFIG_ENV_VAR,
)
from production_scheduler.scheduler import schedule_payload
from production_scheduler.solution import FailureResult

logger = logging.getLogger("production_scheduler.web")

# Initialize FastAPI app
app = FastAPI(
    title="Production Scheduler",
    description="Capability/calendar/changeover-aware production scheduling engine",
    version=__version__
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Loaded lazily so tests can swap the config file through the environment
engine_config: EngineConfig | None = None


def get_base_path():
    return Path(__file__).parent.parent


def get_config_path():
    return get_base_path() / "config" / "engine.yaml"


def get_engine_config() -> EngineConfig:
    """Engine config from ``$SCHEDULER_CONFIG``, else ``config/engine.yaml``."""
    global engine_config

    if engine_config is None:
        path = os.environ.get(CONFIG_ENV_VAR)
        if not path and get_config_path().exists():
            path = str(get_config_path())
        engine_config = load_config(path)
        logger.info(
            "Loaded engine config: time limit %gs, iteration factor %d",
            engine_config.default_time_limit_seconds, engine_config.iteration_factor,
        )
    return engine_config


def error_response(status_code: int, error: str, why: list[str]) -> JSONResponse:
    config = get_engine_config()
    failure = FailureResult(error=error, why=why, version=config.schema_version)
    return JSONResponse(status_code=status_code, content=failure.to_dict())


@app.post("/schedule")
async def create_schedule(request: Request):
    """Schedule a request body.

    200 for any engine outcome (success or infeasible), 400 for invalid
    input, 500 for unexpected errors.
    """
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return error_response(400, "invalid_input", [f"body: invalid JSON ({e})"])

    try:
        config = get_engine_config()
        result = await run_in_threadpool(schedule_payload, payload, config)
    except Exception:
        logger.exception("Unexpected error while scheduling")
        return error_response(500, "internal_error", ["An unexpected error occurred"])

    if isinstance(result, FailureResult) and result.error == "invalid_input":
        return JSONResponse(status_code=400, content=result.to_dict())
    return JSONResponse(status_code=200, content=result.to_dict())


@app.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok", "version": __version__}


@app.get("/api/config")
async def get_config():
    """Engine defaults applied to requests."""
    config = get_engine_config()
    return {
        "version": __version__,
        "schema_version": config.schema_version,
        "default_time_limit_seconds": config.default_time_limit_seconds,
        "iteration_factor": config.iteration_factor,
    }


def main() -> None:
    import uvicorn

    config = get_engine_config()
    configure_logging(config.log_level)
    logger.info("Server listening on http://%s:%d", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
