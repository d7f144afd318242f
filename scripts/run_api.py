"""
Run the LEMS API server with uvicorn.

Environment:
    HOST, PORT       bind address (default 0.0.0.0:3333)
    LEMS_RELOAD=1    auto-reload on code changes
    LEMS_STORE       "mongo" (default) or "memory"
"""

import os
import sys

import uvicorn

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lems.core.config import LOG_LEVEL, STORE_BACKEND


if __name__ == "__main__":
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "3333"))

    print("=" * 60)
    print("LEMS Tournament API Server")
    print("=" * 60)
    print(f"Listening on http://{host}:{port} (store: {STORE_BACKEND})")
    print(f"API Documentation: http://localhost:{port}/docs")
    print(f"Websocket: ws://localhost:{port}/ws/<divisionId>")
    print("=" * 60)

    uvicorn.run(
        "lems.main:app",
        host=host,
        port=port,
        reload=os.getenv("LEMS_RELOAD") == "1",
        log_level=LOG_LEVEL.lower()
    )
