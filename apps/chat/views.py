from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from .services import (
    build_message_data, get_conversation, list_contacts, list_messages,
    message_create, message_delete,
)


class MessageListView(APIView):
    def get(self, request):
        return Response(list_messages(user=request.user))

    def post(self, request):
        message = message_create(
            sender=request.user,
            receiver_id=request.data.get("receiverId"),
            body=request.data.get("message"),
        )
        return Response(
            {"message": "Message created", "data": build_message_data(message)},
            status=status.HTTP_201_CREATED,
        )


class ContactListView(APIView):
    def get(self, request):
        contacts = list_contacts(user=request.user)
        return Response([c.as_dict() for c in contacts])


class ConversationView(APIView):
    def get(self, request, other_id):
        return Response(get_conversation(user=request.user, other_id=other_id))


class MessageDetailView(APIView):
    def delete(self, request, message_id):
        message_delete(message_id=message_id, user=request.user)
        return Response({"message": "Message deleted"})
