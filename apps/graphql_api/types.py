from __future__ import annotations
import strawberry
import datetime
import uuid
from typing import Optional

from apps.chat.services import Contact


@strawberry.type
class UserType:
    id: uuid.UUID
    username: str
    firstname: str
    lastname: str
    created_at: datetime.datetime

    @classmethod
    def from_instance(cls, user) -> "UserType":
        return cls(
            id=user.id,
            username=user.username,
            firstname=user.first_name,
            lastname=user.last_name,
            created_at=user.date_joined,
        )


@strawberry.type
class ContactType:
    counterpart_id: uuid.UUID
    username: str
    firstname: str
    lastname: str
    created_at: datetime.datetime
    last_message: str
    last_message_time: datetime.datetime
    last_message_sender_id: uuid.UUID

    @classmethod
    def from_contact(cls, contact: Contact) -> "ContactType":
        return cls(
            counterpart_id=contact.counterpart_id,
            username=contact.username,
            firstname=contact.first_name,
            lastname=contact.last_name,
            created_at=contact.joined_at,
            last_message=contact.last_message,
            last_message_time=contact.last_message_time,
            last_message_sender_id=contact.last_message_sender_id,
        )


@strawberry.type
class MessageType:
    id: uuid.UUID
    message: str
    sender_id: uuid.UUID
    receiver_id: uuid.UUID
    created_at: datetime.datetime
    sender: Optional[UserType] = None
    receiver: Optional[UserType] = None

    @classmethod
    def from_data(cls, data: dict) -> "MessageType":
        # `data` is the dict produced by apps.chat.services.build_message_data
        def _user(profile):
            if not profile:
                return None
            return UserType(
                id=profile["id"],
                username=profile["username"],
                firstname=profile["firstname"],
                lastname=profile["lastname"],
                created_at=profile["createdAt"],
            )

        return cls(
            id=data["id"],
            message=data["message"],
            sender_id=data["senderId"],
            receiver_id=data["receiverId"],
            created_at=data["createdAt"],
            sender=_user(data.get("sender")),
            receiver=_user(data.get("receiver")),
        )
