from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Message
from .tasks import broadcast_message_task


@receiver(post_save, sender=Message)
def relay_new_message(sender, instance, created, **kwargs):
    """Schedule the live relay once the insert is committed."""
    if created:
        message_id = str(instance.id)
        transaction.on_commit(lambda: broadcast_message_task.delay(message_id))
