# apps/chat/models.py

import uuid
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.contrib.auth import get_user_model
User = get_user_model()


class MessageQuerySet(models.QuerySet):
    def visible(self):
        return self.filter(deleted=False)

    def involving(self, user_id):
        return self.visible().filter(Q(sender_id=user_id) | Q(receiver_id=user_id))

    def between(self, user_id, other_id):
        return self.visible().filter(
            Q(sender_id=user_id, receiver_id=other_id)
            | Q(sender_id=other_id, receiver_id=user_id)
        )


class Message(models.Model):
    """
    One direct message. Rows outlive their participants (no FK constraint),
    so readers must tolerate identity ids that no longer resolve.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    body = models.TextField()
    sender = models.ForeignKey(
        User,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name='sent_messages'
    )
    receiver = models.ForeignKey(
        User,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name='received_messages'
    )
    created_at = models.DateTimeField(default=timezone.now, editable=False, db_index=True)
    deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = MessageQuerySet.as_manager()

    class Meta:
        ordering = ('created_at', 'id')
        indexes = [
            models.Index(fields=['sender', 'created_at'], name='chat_msg_sender_created_idx'),
            models.Index(fields=['receiver', 'created_at'], name='chat_msg_receiver_created_idx'),
        ]

    def __str__(self):
        return f"Message {self.id} from {self.sender_id} to {self.receiver_id}"
