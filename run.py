"""Run the BookBuddy FastAPI application with uvicorn."""

import uvicorn

from bookbuddy.application.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "bookbuddy.application.api:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
