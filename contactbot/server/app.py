"""Bot server -- app factory and entry point."""

from __future__ import annotations

import logging

from aiohttp import web
from botbuilder.core import BotFrameworkAdapter, BotFrameworkAdapterSettings, TurnContext
from botbuilder.schema import Activity, ActivityTypes

from .. import __version__
from ..config.settings import cfg
from ..delivery.group_sender import GroupSender
from ..delivery.rate_limiter import RateLimiter
from ..delivery.storage import LocalFileStorage
from ..messaging import texts
from ..messaging.bot import Bot
from ..messaging.commands import CommandDispatcher
from ..messaging.transport import BotTransport
from ..state.chat_session import get_session_store
from ..state.user_store import UserStore
from .bot_endpoint import BotEndpoint

logger = logging.getLogger(__name__)

LIMITER_KEY = web.AppKey("limiter", RateLimiter)
BOT_KEY = web.AppKey("bot", Bot)


def create_adapter() -> BotFrameworkAdapter:
    settings = BotFrameworkAdapterSettings(
        app_id=cfg.bot_app_id or None,
        app_password=cfg.bot_app_password or None,
        channel_auth_tenant=cfg.bot_app_tenant_id or None,
    )
    adapter = BotFrameworkAdapter(settings)

    async def on_error(context: TurnContext, error: Exception) -> None:
        logger.error("Bot turn error: %s", error, exc_info=True)
        try:
            await context.send_activity(
                Activity(type=ActivityTypes.message, text=texts.GENERIC_ERROR, text_format="plain")
            )
        except Exception as send_exc:
            logger.warning("Could not report turn error: %s", send_exc)

    adapter.on_turn_error = on_error
    return adapter


def create_app(adapter: BotFrameworkAdapter | None = None) -> web.Application:
    cfg.ensure_dirs()
    adapter = adapter or create_adapter()

    limiter = RateLimiter(cfg.rate_limit)
    transport = BotTransport(adapter, cfg.bot_app_id)
    sender = GroupSender(
        limiter,
        transport.send_batch,
        storage=LocalFileStorage(),
        config=cfg.delivery,
    )
    sessions = get_session_store()
    users = UserStore()
    dispatcher = CommandDispatcher(sessions, users, transport, sender)
    bot = Bot(dispatcher, sessions, users, transport)

    app = web.Application()
    app[LIMITER_KEY] = limiter
    app[BOT_KEY] = bot
    BotEndpoint(adapter, bot).register(app.router)
    app.router.add_get("/health", _health)
    app.on_cleanup.append(_on_cleanup)
    return app


async def _on_cleanup(app: web.Application) -> None:
    await app[BOT_KEY].drain()
    await app[LIMITER_KEY].stop()


async def _health(_req: web.Request) -> web.Response:
    return web.json_response({"status": "ok", "version": __version__})


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s  %(name)s  %(levelname)s  %(message)s",
    )
    logger.info("Starting contactbot on port %d ...", cfg.bot_port)
    web.run_app(create_app(), host="0.0.0.0", port=cfg.bot_port)


if __name__ == "__main__":
    main()
