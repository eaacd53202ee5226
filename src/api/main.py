"""FastAPI application entry point."""

import logging
import os
import tomllib
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

# Must run before get_settings() reads the environment
load_dotenv()

from adapter.mongodb.connection import get_mongodb_client
from adapter.mongodb.user_directory import MongoUserDirectory
from api.dependencies import get_settings
from api.routes import health, users
from utils.logging import setup_structured_logging

logger = logging.getLogger(__name__)

_project_root = Path(__file__).parent.parent.parent
try:
    with open(_project_root / "pyproject.toml", "rb") as f:
        VERSION = tomllib.load(f)["project"]["version"]
except FileNotFoundError:
    VERSION = "0.0.0"

SERVICE_NAME = "Users Service"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load settings once, configure logging and make sure the email index exists."""
    settings = get_settings()
    setup_structured_logging(settings.log_level)

    client = get_mongodb_client(settings.mongo)
    if client:
        directory = MongoUserDirectory(
            client[settings.mongo.database_name],
            settings.mongo.users_collection_name,
        )
        if directory.ensure_indexes():
            logger.info("MongoDB indexes verified/created successfully")
        else:
            logger.warning("Failed to create users indexes; duplicate emails are only caught by the pre-check")
    else:
        logger.warning("MongoDB unavailable, skipping index creation")

    yield


app = FastAPI(
    title=SERVICE_NAME,
    description="User identity: registration, login with signed tokens, profile updates",
    version=VERSION,
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed or missing bodies are a 400, not FastAPI's default 422."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request", "errors": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]


app.include_router(users.router)
app.include_router(health.router)


@app.get("/")
async def root():
    return {
        "service": SERVICE_NAME,
        "version": VERSION,
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port, access_log=False)
