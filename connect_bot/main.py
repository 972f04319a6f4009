from __future__ import annotations

import uvicorn
from dotenv import load_dotenv

from .config import load_settings
from .logging_config import setup_logging
from .service import ConnectService
from .web import create_app


def main() -> int:
    load_dotenv()
    settings = load_settings()
    log = setup_logging(settings.log_level)
    if not settings.token:
        log.error(
            "SLACK_BOT_TOKEN is not set. "
            "Export it in your environment or .env before running."
        )
        return 2
    service = ConnectService(settings)
    app = create_app(service)
    log.info("Server listening on %s:%s", settings.host, settings.port)
    # A failed auth.test during lifespan startup makes uvicorn exit non-zero.
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
