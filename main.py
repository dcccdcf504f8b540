"""Main entry point for the FastAPI application."""

import logging

import uvicorn

from components.core.config import get_settings
from restapi.router import create_app

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", reload=settings.DEBUG)
