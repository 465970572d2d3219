import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied, ValidationError
from django.db import DatabaseError
from django.utils import timezone

from apps.core.exceptions import StoreUnavailable
from apps.users.services import build_user_data, clean_text, parse_id, profiles_by_id
from .models import Message

User = get_user_model()
logger = logging.getLogger(__name__)


# ---------- Data model ----------
@dataclass
class Contact:
    """One conversation partner and the latest message exchanged with them."""
    counterpart_id:         UUID
    first_name:             str
    last_name:              str
    username:               str
    joined_at:              datetime
    last_message:           str
    last_message_time:      datetime
    last_message_sender_id: UUID

    def as_dict(self) -> dict:
        return {
            "counterpartId": self.counterpart_id,
            "firstname": self.first_name,
            "lastname": self.last_name,
            "username": self.username,
            "createdAt": self.joined_at,
            "lastMessage": self.last_message,
            "lastMessageTime": self.last_message_time,
            "lastMessageSenderId": self.last_message_sender_id,
        }


def build_message_data(message: Message, profiles: Optional[Dict[UUID, "User"]] = None) -> dict:  # type: ignore
    """
    Serialize a message. When `profiles` is given, sender and receiver are
    expanded from it; an identity missing from it is rendered as None.
    """
    data = {
        "id": message.id,
        "message": message.body,
        "senderId": message.sender_id,
        "receiverId": message.receiver_id,
        "createdAt": message.created_at,
    }
    if profiles is not None:
        sender = profiles.get(message.sender_id)
        receiver = profiles.get(message.receiver_id)
        data["sender"] = build_user_data(sender) if sender else None
        data["receiver"] = build_user_data(receiver) if receiver else None
    return data


def participant_profiles(messages: Iterable[Message]) -> Dict[UUID, "User"]:  # type: ignore
    ids = set()
    for message in messages:
        ids.add(message.sender_id)
        ids.add(message.receiver_id)
    return profiles_by_id(ids)


# ---------- Store access ----------
def messages_involving(user_id) -> List[Message]:
    """Every visible message the identity sent or received, oldest first."""
    try:
        return list(Message.objects.involving(user_id).order_by("created_at", "id"))
    except DatabaseError as exc:
        raise StoreUnavailable("Could not load messages") from exc


def messages_between(user_id, other_id) -> List[Message]:
    """The visible history of one pair of identities, oldest first."""
    try:
        return list(Message.objects.between(user_id, other_id).order_by("created_at", "id"))
    except DatabaseError as exc:
        raise StoreUnavailable("Could not load the conversation") from exc


def message_create(*, sender, receiver_id, body: str) -> Message:
    receiver_pk = parse_id(receiver_id, "receiver id")
    body = clean_text(body, "Message body")
    if not body:
        raise ValidationError("Message body is required")

    if not User.objects.filter(pk=sender.pk).exists():
        raise User.DoesNotExist("Sender not found")
    if not User.objects.filter(pk=receiver_pk).exists():
        raise User.DoesNotExist("Receiver not found")

    message = Message.objects.create(body=body, sender_id=sender.pk, receiver_id=receiver_pk)
    logger.info("Message %s sent from %s to %s", message.id, sender.pk, receiver_pk)
    return message


def message_delete(*, message_id, user) -> Message:
    """Soft-delete a message; only its sender may do so."""
    pk = parse_id(message_id, "message id")
    try:
        message = Message.objects.visible().get(pk=pk)
    except Message.DoesNotExist:
        raise Message.DoesNotExist("Message not found")

    if message.sender_id != user.pk:
        raise PermissionDenied("Forbidden: you can only delete your own messages")

    message.deleted = True
    message.deleted_at = timezone.now()
    message.save(update_fields=["deleted", "deleted_at"])
    logger.info("Message %s deleted by %s", message.id, user.pk)
    return message


# ---------- Read side ----------
def list_messages(*, user) -> List[dict]:
    messages = messages_involving(user.pk)
    profiles = participant_profiles(messages)
    return [build_message_data(m, profiles) for m in messages]


def get_conversation(*, user, other_id) -> List[dict]:
    other_pk = parse_id(other_id, "user id")
    messages = messages_between(user.pk, other_pk)
    profiles = participant_profiles(messages)
    return [build_message_data(m, profiles) for m in messages]


def latest_by_counterpart(user_id, messages: Iterable[Message]) -> Dict[UUID, Message]:
    """
    Fold a message log into counterpart id -> latest message, in one pass.

    Input order does not matter for the result except on equal timestamps:
    there the message seen last wins, so feeding rows in (created_at, id)
    order makes the greatest id win.
    """
    latest: Dict[UUID, Message] = {}
    for message in messages:
        counterpart = message.receiver_id if message.sender_id == user_id else message.sender_id
        current = latest.get(counterpart)
        if current is None or message.created_at >= current.created_at:
            latest[counterpart] = message
    return latest


def list_contacts(*, user) -> List[Contact]:
    """
    Distinct conversation partners of `user`, most recently active first.

    Two store round trips: the message log, then one batched profile
    lookup for the distinct counterparts. Counterparts whose account no
    longer exists are left out.
    """
    messages = messages_involving(user.pk)
    latest = latest_by_counterpart(user.pk, messages)
    if not latest:
        return []

    try:
        profiles = profiles_by_id(latest.keys())
    except DatabaseError as exc:
        raise StoreUnavailable("Could not load contact profiles") from exc

    contacts = []
    for counterpart_id, message in latest.items():
        profile = profiles.get(counterpart_id)
        if profile is None:
            logger.debug("Skipping contact %s: account no longer exists", counterpart_id)
            continue
        contacts.append(Contact(
            counterpart_id=counterpart_id,
            first_name=profile.first_name,
            last_name=profile.last_name,
            username=profile.username,
            joined_at=profile.date_joined,
            last_message=message.body,
            last_message_time=message.created_at,
            last_message_sender_id=message.sender_id,
        ))

    contacts.sort(key=lambda c: (c.last_message_time, str(c.counterpart_id)), reverse=True)
    logger.debug("Built %d contacts for %s from %d messages", len(contacts), user.pk, len(messages))
    return contacts
