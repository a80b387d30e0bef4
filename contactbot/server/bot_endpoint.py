"""Webhook for Bot Framework activities (``/api/messages``)."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from aiohttp import web
from botbuilder.schema import Activity

from .. import __version__
from ..config.settings import cfg

if TYPE_CHECKING:
    from botbuilder.core import BotFrameworkAdapter

    from ..messaging.bot import Bot

logger = logging.getLogger(__name__)


def _error(message: str, status: int) -> web.Response:
    return web.json_response({"status": "error", "message": message}, status=status)


def _credentials_configured() -> bool:
    return bool(cfg.bot_app_id and cfg.bot_app_password)


class BotEndpoint:
    def __init__(self, adapter: BotFrameworkAdapter, bot: Bot) -> None:
        self.adapter = adapter
        self._bot = bot

    def register(self, router: web.UrlDispatcher) -> None:
        router.add_post("/api/messages", self.handle)
        router.add_get("/api/messages", self._probe)

    async def _probe(self, _req: web.Request) -> web.Response:
        return web.json_response({
            "status": "ok",
            "endpoint": "/api/messages",
            "method": "POST required",
            "version": __version__,
            "bot_configured": _credentials_configured(),
            "restricted": cfg.restrict_to_users,
        })

    async def _read_activity(self, req: web.Request) -> dict[str, Any] | web.Response:
        raw = await req.read()
        try:
            body = json.loads(raw)
        except ValueError as exc:
            logger.error("[bot] Invalid JSON body (%d bytes): %s", len(raw), exc)
            return _error(f"Invalid JSON: {exc}", 400)
        if not isinstance(body, dict):
            logger.error("[bot] Activity body is %s, not an object", type(body).__name__)
            return _error("Invalid JSON: activity must be an object", 400)
        return body

    async def handle(self, req: web.Request) -> web.Response:
        if not _credentials_configured():
            logger.warning("[bot] Rejected activity: BOT_APP_ID/BOT_APP_PASSWORD not set")
            return _error("Bot credentials not configured", 503)

        body = await self._read_activity(req)
        if isinstance(body, web.Response):
            return body

        kind = body.get("type", "?")
        sender = (body.get("from") or {}).get("id", "?")
        logger.info("[bot] %s activity from %s on %s", kind, sender, body.get("channelId", "?"))

        try:
            response = await self.adapter.process_activity(
                Activity().deserialize(body),
                req.headers.get("Authorization", ""),
                self._bot.on_turn,
            )
        except PermissionError as exc:
            logger.warning("[bot] Unauthorized activity from %s: %s", sender, exc)
            return web.Response(status=401, text=str(exc))
        except Exception as exc:
            logger.exception("[bot] Failed to process %s activity from %s", kind, sender)
            return _error(f"Processing failed: {exc}", 500)

        if not response:
            return web.Response(status=200)
        return web.Response(status=response.status, body=response.body, content_type="application/json")
