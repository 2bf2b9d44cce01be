"""
Process entry point: python -m menu_api (or the menu-api console script).
Exits with status 1 before binding a listener when DATABASE_URL is missing.
"""
from __future__ import annotations

import sys

import uvicorn
from pydantic import ValidationError

from menu_api.config import Settings
from menu_api.core.logging import configure_logging, get_logger

logger = get_logger("menu_api")


def load_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as e:
        fields = {str(err["loc"][0]) for err in e.errors() if err.get("loc")}
        if "database_url" in fields:
            logger.critical("FATAL ERROR: DATABASE_URL not found in environment variables.")
        else:
            logger.critical("FATAL ERROR: invalid configuration", extra={"error": str(e)})
        sys.exit(1)


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)

    from menu_api.main import create_app

    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
