import logging
from typing import Optional

from aiohttp import web
from botbuilder.schema import Activity

from bot import ADAPTER, ChatBot
from config import CONFIG
from handler import MessageHandler
from model import LLMGateway

logger = logging.getLogger(__name__)


async def status(request: web.Request) -> web.Response:
    handler: MessageHandler = request.app["handler"]
    return web.json_response({"status": "Chat bot active", **handler.status()})


async def health(request: web.Request) -> web.Response:
    return web.Response(status=200, text="OK")


async def messages(request: web.Request) -> web.Response:
    auth_header = request.headers.get("Authorization", "")
    try:
        body = await request.json()
    except ValueError:
        return web.Response(status=400, text="Invalid JSON body")

    activity = Activity().deserialize(body)
    bot: ChatBot = request.app["bot"]

    await ADAPTER.process_activity(auth_header, activity, bot.on_turn)

    return web.Response(status=200)


async def on_startup(app: web.Application):
    if app["handler"] is None:
        app["handler"] = MessageHandler(gateway=LLMGateway())
    app["bot"] = ChatBot(app["handler"])

    await app["handler"].start()
    app["bot"].on_ready()
    logger.info("🚀 Server started on port %s", CONFIG.PORT)


async def on_shutdown(app: web.Application):
    logger.info("🛑 Shutting down...")
    app["bot"].mark_disconnected()
    await app["handler"].stop()


def create_app(handler: Optional[MessageHandler] = None) -> web.Application:
    app = web.Application()
    app["handler"] = handler

    # lifecycle hooks
    app.on_startup.append(on_startup)
    app.on_shutdown.append(on_shutdown)

    app.router.add_get("/", status)
    app.router.add_get("/health", health)
    app.router.add_post("/api/messages", messages)
    return app


def main():
    logging.basicConfig(
        level=CONFIG.LOG_LEVEL,
        format="[%(asctime)s] %(levelname)s - %(message)s",
    )
    # run_app turns SIGINT/SIGTERM into a graceful shutdown
    web.run_app(create_app(), host=CONFIG.HOST, port=CONFIG.PORT)


if __name__ == "__main__":
    main()
