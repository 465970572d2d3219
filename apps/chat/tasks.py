import logging

from asgiref.sync import async_to_sync
from celery import shared_task
from channels.layers import get_channel_layer

from .models import Message
from .services import build_message_data
from .utils import to_wire, user_group_name

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=5)
def broadcast_message_task(self, message_id):
    """Push a freshly committed message to the sockets of both participants."""
    message = Message.objects.visible().filter(pk=message_id).first()
    if message is None:
        logger.warning("Message %s vanished before it could be broadcast", message_id)
        return

    channel_layer = get_channel_layer()
    if channel_layer is None:
        logger.warning("No channel layer configured; message %s not relayed", message_id)
        return

    event = {
        'type': 'chat.message',
        'message': to_wire(build_message_data(message)),
    }
    try:
        for user_id in {message.sender_id, message.receiver_id}:
            async_to_sync(channel_layer.group_send)(user_group_name(user_id), event)
    except Exception as exc:
        logger.warning("Relay of message %s failed, retrying: %s", message_id, exc)
        raise self.retry(exc=exc)
