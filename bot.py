import logging
from typing import Optional

from botbuilder.core import MessageFactory, TurnContext
from botbuilder.integration.aiohttp import CloudAdapter, ConfigurationBotFrameworkAuthentication
from botbuilder.schema import ActivityTypes

from config import CONFIG
from handler import InboundMessage, MessageHandler

logger = logging.getLogger(__name__)

ADAPTER = CloudAdapter(ConfigurationBotFrameworkAuthentication(CONFIG))


def session_key(turn_context: TurnContext) -> str:
    activity = turn_context.activity
    channel = (activity.channel_id or "default").strip()
    conversation = getattr(activity.conversation, "id", None) or "default"
    return f"{channel}:{conversation.strip()}"


def is_from_self(turn_context: TurnContext) -> bool:
    activity = turn_context.activity
    sender = getattr(activity.from_property, "id", None)
    bot_id = getattr(activity.recipient, "id", None)
    return bool(sender) and sender == bot_id


class ChatBot:
    """Feeds Bot Framework activities into the message handler."""

    def __init__(self, handler: MessageHandler):
        self.handler = handler
        self.connected = False

    def on_ready(self) -> None:
        self.connected = True
        logger.info("✅ Transport connected and ready.")

    def on_disconnected(self, reason: Optional[str]) -> None:
        self.connected = False
        logger.warning("❌ Transport disconnected: %s", reason)

    async def on_turn(self, turn_context: TurnContext) -> None:
        activity_type = turn_context.activity.type
        if activity_type == ActivityTypes.message:
            await self.on_message_activity(turn_context)
        elif activity_type == ActivityTypes.end_of_conversation:
            self.on_disconnected(turn_context.activity.code or turn_context.activity.text)
        else:
            logger.debug("Ignoring activity type: %s", activity_type)

    async def on_message_activity(self, turn_context: TurnContext) -> None:
        message = InboundMessage(
            session_id=session_key(turn_context),
            text=turn_context.activity.text or "",
            from_self=is_from_self(turn_context),
        )

        async def reply(text: str):
            return await turn_context.send_activity(MessageFactory.text(text))

        await self.handler.handle(message, reply)

    def mark_disconnected(self) -> None:
        """Stateless adapter: there is no transport session to close, only the state flag."""
        if self.connected:
            self.on_disconnected("shutdown")
