#!/usr/bin/env python3
"""
Lucid Vision API - Main Application
"""

import os
import uvicorn
from dotenv import load_dotenv

# IMPORTANT: Load environment before importing application modules that read env
# so variables like JWT_SECRET_KEY from backend/.env are available
_here = os.path.dirname(os.path.abspath(__file__))
_env_path = os.path.join(_here, ".env")
if os.path.exists(_env_path):
    load_dotenv(dotenv_path=_env_path)
else:
    # Fallback to default search (cwd/upwards) if file not found next to this module
    load_dotenv()

from core.app import create_app  # noqa: E402
from logging_config import get_logger  # noqa: E402

logger = get_logger(__name__)


def main():
    """Main entry point"""
    environment = os.getenv("ENVIRONMENT", "production")
    port = int(os.getenv("PORT", "8000"))

    # The in-memory store is per process; one worker unless Redis is configured
    workers_cfg = int(os.getenv("WORKERS", "0") or 0)
    if workers_cfg > 0:
        workers = workers_cfg
    else:
        workers = 2 if os.getenv("REDIS_URL") else 1

    logger.info("Starting server", environment=environment, port=port, workers=workers)

    if environment == "production":
        uvicorn.run(
            "main:app",
            host="0.0.0.0",
            port=port,
            workers=workers,
            log_level="info",
            access_log=True,
            reload=False,
            server_header=False,
            date_header=False,
        )
    else:
        # Development configuration
        uvicorn.run(
            "main:app",
            host="0.0.0.0",
            port=port,
            reload=True,
            log_level="debug"
        )


# Create app instance for uvicorn
app = create_app()

if __name__ == "__main__":
    main()
