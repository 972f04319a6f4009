import logging
import sys

def setup_logging(level: int | str = logging.INFO) -> logging.Logger:
    logger = logging.getLogger("connect")
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.INFO  # unknown name
    logger.setLevel(level)
    if logger.handlers:
        return logger  # already configured
    handler = logging.StreamHandler(sys.stdout)
    fmt = logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    handler.setFormatter(fmt)
    logger.addHandler(handler)
    # Slack client and web server chatter only shows when debugging
    noisy = logging.WARNING if level > logging.DEBUG else logging.DEBUG
    for name in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(name).setLevel(noisy)
    return logger
