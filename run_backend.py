#!/usr/bin/env python
"""Script to run the task server with auto-reload for local development."""
import uvicorn

from tasktracker.config import LOG_LEVEL, SERVER_HOST, SERVER_PORT
from tasktracker.logging_setup import setup_logging

if __name__ == "__main__":
    setup_logging(LOG_LEVEL)
    uvicorn.run(
        "tasktracker.main:create_app",
        factory=True,
        host=SERVER_HOST,
        port=SERVER_PORT,
        reload=True,
        log_config=None,
    )
