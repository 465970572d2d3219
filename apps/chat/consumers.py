# apps/chat/consumers.py
import logging
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from channels.db import database_sync_to_async
from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import DatabaseError

from apps.core.exceptions import StoreUnavailable, error_message
from apps.users.services import parse_id
from .services import build_message_data, message_create
from .utils import to_wire, user_group_name

logger = logging.getLogger(__name__)


class MessageConsumer(AsyncJsonWebsocketConsumer):
    """
    Live side of direct messaging. Each socket listens on its user's group;
    new messages arrive through `chat.message` events sent by the relay task.
    """

    async def connect(self):
        self.user = self.scope.get("user")
        if not self.user or not self.user.is_authenticated:
            await self.close()
            return

        self.group_name = user_group_name(self.user.id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        if getattr(self, "group_name", None):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    # Dispatcher for incoming frames
    async def receive_json(self, content):
        if not isinstance(content, dict):
            await self.send_error("Frames must be JSON objects")
            return

        command = content.get("type")

        if command == "send_message":
            await self.handle_send_message(content)
        elif command == "typing":
            await self.handle_typing(content)
        else:
            await self.send_error(f"Unknown command: {command}")

    # --- Handlers for specific commands ---

    async def handle_send_message(self, content):
        try:
            message = await self.create_message(content.get("receiverId"), content.get("message"))
        except (ValidationError, ObjectDoesNotExist) as exc:
            await self.send_error(error_message(exc))
            return
        except (StoreUnavailable, DatabaseError) as exc:
            logger.error("Store failure on send_message from %s", self.user.id, exc_info=exc)
            await self.send_error("The service is temporarily unavailable")
            return

        await self.send_json({
            'type': 'message.sent',
            'message': to_wire(build_message_data(message)),
        })

    async def handle_typing(self, content):
        try:
            receiver_id = parse_id(content.get("receiverId"), "receiver id")
        except ValidationError as exc:
            await self.send_error(error_message(exc))
            return

        await self.channel_layer.group_send(
            user_group_name(receiver_id),
            {
                'type': 'typing.indicator',
                'senderId': str(self.user.id),
                'status': content.get("status", "typing"),
            }
        )

    async def send_error(self, message):
        await self.send_json({'type': 'error', 'error': message})

    # --- Events broadcast by the channel layer ---

    async def chat_message(self, event):
        await self.send_json(event)

    async def typing_indicator(self, event):
        await self.send_json(event)

    # --- Database helpers ---
    @database_sync_to_async
    def create_message(self, receiver_id, body):
        return message_create(sender=self.user, receiver_id=receiver_id, body=body)
