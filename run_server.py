"""
Development server runner.

Reads HOST, PORT and DEBUG through the application settings so the
server binds where the app expects to be reached.

Usage: python run_server.py
"""

from __future__ import annotations

import uvicorn

from taskapi.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "taskapi.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug and settings.app_env == "development",
        reload_dirs=["taskapi"],
        log_config=None,
    )


if __name__ == "__main__":
    main()
