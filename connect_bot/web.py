"""FastAPI application receiving Slack slash commands and event callbacks."""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from .adapters.slack import verify_signature
from .commands.router import CommandContext
from .service import ConnectService

log = logging.getLogger("connect.web")


def create_app(service: ConnectService) -> FastAPI:
    """Build the web application around ``service``.

    The service is started and stopped by the application lifespan.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await service.start()
        yield
        await service.stop()

    app = FastAPI(title="Connect Manager", lifespan=lifespan)
    app.state.service = service

    def signed(request: Request, body: bytes) -> bool:
        secret = service.settings.signing_secret
        if not secret:
            return True
        return verify_signature(
            secret,
            body,
            request.headers.get("x-slack-request-timestamp", ""),
            request.headers.get("x-slack-signature", ""),
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/slack/events")
    async def slack_events(request: Request) -> Response:
        log.info("Received Slack event")
        body = await request.body()
        if not signed(request, body):
            log.warning("Slack signature verification failed")
            return Response(status_code=401)
        try:
            payload = json.loads(body)
        except ValueError as exc:
            log.error("Error parsing Slack event: %s", exc)
            return Response(status_code=500)

        if isinstance(payload, dict) and payload.get("type") == "url_verification":
            log.info("Responded to URL verification challenge")
            return PlainTextResponse(str(payload.get("challenge", "")))
        return Response(status_code=200)

    @app.post("/slack/command")
    async def slack_command(request: Request) -> Response:
        body = await request.body()
        if not signed(request, body):
            log.warning("Slack signature verification failed")
            return Response(status_code=401)
        # Starlette caches the body read above
        try:
            form = await request.form()
        except Exception:
            log.exception("Error parsing slash command")
            return Response(status_code=500)

        def field(name: str) -> str:
            return str(form.get(name, ""))

        command = field("command")
        if command != service.settings.command:
            log.warning("Received unknown command: %r", command)
            return Response(status_code=500)

        text = field("text")
        log.info("Received %s command with text: %s", command, text)
        ctx = CommandContext(
            channel_id=field("channel_id"),
            channel_name=field("channel_name"),
            user_id=field("user_id"),
        )
        result = await service.handle_command(text, ctx)
        return JSONResponse({"text": result.text})

    return app
