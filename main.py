#!/usr/bin/env python3
import os

import uvicorn

from revenue_monitor.app import create_app

# Create the FastAPI app
app = create_app()


if __name__ == "__main__":
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "3001"))
    reload_enabled = os.getenv("RELOAD", "false").lower() == "true"

    print(f"Starting Revenue Monitor API on {host}:{port}")
    print(f"Health check: http://{host}:{port}/health")

    uvicorn.run("main:app", host=host, port=port, reload=reload_enabled)
