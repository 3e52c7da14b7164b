"""Main entry point for the FastAPI application."""

import uvicorn

from components.core.config import get_settings
from components.core.log import setup_logging
from restapi.router import create_app

settings = get_settings()
setup_logging(settings.effective_log_level, settings.LOG_FILE)

app = create_app()

if __name__ == "__main__":
    uvicorn.run("main:app", reload=settings.DEBUG)
