import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from .config import CORS_ORIGINS, LOG_LEVEL, RPC_PREFIX, SERVER_HOST, SERVER_PORT
from .database import Database
from .logging_setup import setup_logging
from .routers import rpc

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


def create_app(database: Optional[Database] = None) -> FastAPI:
    """Build the API around ``database`` (a handle on DATABASE_URL by default)."""
    database = database or Database()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.open()
        try:
            yield
        finally:
            database.close()

    app = FastAPI(
        title="Task Tracker API",
        description="Create, list, edit, complete and delete tasks over RPC",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.database = database

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(rpc.router, prefix=RPC_PREFIX, tags=["rpc"])

    @app.get("/", include_in_schema=False)
    def index():
        return FileResponse(STATIC_DIR / "index.html")

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    return app


def main() -> None:
    setup_logging(LOG_LEVEL)
    logger.info("Task server listening at port: %s", SERVER_PORT)
    uvicorn.run(
        "tasktracker.main:create_app",
        factory=True,
        host=SERVER_HOST,
        port=SERVER_PORT,
        log_config=None,
    )


if __name__ == "__main__":
    main()
