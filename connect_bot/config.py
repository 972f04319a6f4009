import os
from dataclasses import dataclass

@dataclass(frozen=True)
class Settings:
    token: str
    signing_secret: str = ""
    data_dir: str = "."
    # Only slash commands with this name are handled
    command: str = "/connect"
    refresh_interval: float = 10.0
    http_timeout: float = 10.0
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

def load_settings() -> Settings:
    return Settings(
        token=os.getenv("SLACK_BOT_TOKEN", "").strip(),
        signing_secret=os.getenv("SLACK_SIGNING_SECRET", "").strip(),
        data_dir=os.getenv("CONNECT_DATA_DIR", "."),
        command=os.getenv("CONNECT_COMMAND", "/connect"),
        refresh_interval=float(os.getenv("CONNECT_REFRESH_SECONDS", "10")),
        http_timeout=float(os.getenv("HTTP_TIMEOUT", "10")),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
