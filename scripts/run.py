#!/usr/bin/env python3
"""Run the Switchboard gateway with uvicorn.

Usage:
    python scripts/run.py              # Serve on SWITCHBOARD_HOST:SWITCHBOARD_PORT
    python scripts/run.py --port 3000  # Custom port
    python scripts/run.py --no-reload  # Disable auto-reload in development
"""

import argparse
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import structlog

from switchboard.config import settings

logger = structlog.get_logger()


def run_http_mode(host: str, port: int, reload: bool) -> None:
    """Run the gateway over HTTP."""
    import uvicorn

    logger.info("starting_switchboard", mode="http", host=host, port=port)

    uvicorn.run(
        "switchboard.app:api",
        host=host,
        port=port,
        reload=reload,
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the Switchboard gateway")
    parser.add_argument("--host", default=settings.host, help="Bind address")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to listen on")
    parser.add_argument("--no-reload", action="store_true", help="Disable auto-reload")
    args = parser.parse_args()

    run_http_mode(
        args.host,
        args.port,
        reload=(settings.env == "development" and not args.no_reload),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
