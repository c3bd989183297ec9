#!/usr/bin/env python3
"""
Server startup script.
Development runs a single worker with hot reload; production runs several workers.
"""

import uvicorn
import os
import sys
import logging
from pathlib import Path

# Add the app directory to Python path
APP_DIR = str(Path(__file__).parent / "app")
sys.path.append(APP_DIR)

logger = logging.getLogger("run_server")

def main():
    # Server configuration
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 8000))
    workers = int(os.getenv("WORKERS", 4))
    development = os.getenv("DEVELOPMENT", "true").lower() == "true"

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    logger.info(f"Starting Habit Streak API server on {host}:{port} (development={development})")

    if development:
        # Hot reload requires a single worker
        uvicorn.run(
            "main:app",
            host=host,
            port=port,
            reload=True,
            workers=1,
            app_dir=APP_DIR,
            limit_concurrency=100,
            timeout_keep_alive=5
        )
    else:
        logger.info(f"Production mode: {workers} workers")
        uvicorn.run(
            "main:app",
            host=host,
            port=port,
            workers=workers,
            reload=False,
            app_dir=APP_DIR,
            limit_concurrency=1000,
            timeout_keep_alive=30
        )

if __name__ == "__main__":
    main()
