from __future__ import annotations
import strawberry
from typing import List
from strawberry.types import Info
from graphql import GraphQLError
from django.core.exceptions import ObjectDoesNotExist, PermissionDenied as DjangoPermissionDenied, ValidationError

from apps.core.exceptions import StoreUnavailable, error_message
from apps.chat.services import (
    build_message_data, get_conversation, list_contacts, list_messages,
    message_create, message_delete,
)
from apps.graphql_api.utils import require_user
from .types import ContactType, MessageType, UserType


def _client_error(exc: Exception) -> GraphQLError:
    return GraphQLError(error_message(exc))


# ---------- Mutations ----------
@strawberry.type
class Mutation:
    @strawberry.mutation
    def send_message(self, info: Info, receiver_id: str, message: str) -> MessageType:
        user = require_user(info)
        try:
            created = message_create(sender=user, receiver_id=receiver_id, body=message)
        except (ValidationError, ObjectDoesNotExist) as e:
            raise _client_error(e)
        return MessageType.from_data(build_message_data(created))

    @strawberry.mutation
    def delete_message(self, info: Info, id: str) -> bool:
        user = require_user(info)
        try:
            message_delete(message_id=id, user=user)
        except (ValidationError, ObjectDoesNotExist, DjangoPermissionDenied) as e:
            raise _client_error(e)
        return True


# ---------- Queries ----------
@strawberry.type
class Query:
    @strawberry.field
    def me(self, info: Info) -> UserType:
        return UserType.from_instance(require_user(info))

    @strawberry.field
    def contacts(self, info: Info) -> List[ContactType]:
        user = require_user(info)
        try:
            contacts = list_contacts(user=user)
        except StoreUnavailable as e:
            raise GraphQLError("The service is temporarily unavailable") from e
        return [ContactType.from_contact(c) for c in contacts]

    @strawberry.field
    def messages(self, info: Info) -> List[MessageType]:
        user = require_user(info)
        return [MessageType.from_data(d) for d in list_messages(user=user)]

    @strawberry.field
    def conversation(self, info: Info, other_id: str) -> List[MessageType]:
        user = require_user(info)
        try:
            history = get_conversation(user=user, other_id=other_id)
        except ValidationError as e:
            raise _client_error(e)
        return [MessageType.from_data(d) for d in history]


schema = strawberry.Schema(query=Query, mutation=Mutation)
