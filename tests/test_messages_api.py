import uuid
from unittest.mock import patch

import pytest
from django.db import DatabaseError

from apps.chat.models import Message
from tests.conftest import at

MESSAGES_URL = "/api/v1/messages/"
CONTACTS_URL = "/api/v1/messages/contacts/"

pytestmark = pytest.mark.django_db


def conversation_url(other_id):
    return f"/api/v1/messages/conversation/{other_id}/"


def message_url(message_id):
    return f"/api/v1/messages/{message_id}/"


class TestAuthentication:

    @pytest.mark.parametrize("url", [MESSAGES_URL, CONTACTS_URL])
    def test_missing_token_is_rejected(self, api_client, url):
        response = api_client.get(url)
        assert response.status_code == 401
        assert "error" in response.json()

    def test_invalid_token_is_rejected(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Bearer not-a-jwt")
        response = api_client.get(CONTACTS_URL)
        assert response.status_code == 401
        assert response.json() == {"error": "Missing or invalid token"}

    def test_wrong_scheme_is_rejected(self, api_client, alice):
        api_client.credentials(HTTP_AUTHORIZATION="Token abc")
        assert api_client.get(CONTACTS_URL).status_code == 401


class TestContacts:

    def test_latest_message_per_counterpart(self, alice, bob, send, client_for):
        send(alice, bob, "Hello 1", at(14, 30))
        send(bob, alice, "Hello 2", at(14, 35))

        response = client_for(alice).get(CONTACTS_URL)

        assert response.status_code == 200
        assert response.json() == [{
            "counterpartId": str(bob.id),
            "firstname": "Bob",
            "lastname": "Durand",
            "username": "bob",
            "createdAt": response.json()[0]["createdAt"],
            "lastMessage": "Hello 2",
            "lastMessageTime": "2024-02-15T14:35:00Z",
            "lastMessageSenderId": str(bob.id),
        }]

    def test_most_recent_conversation_first(self, alice, bob, carol, send, client_for):
        send(alice, bob, "Hello 1", at(14, 30))
        send(bob, alice, "Hello 2", at(14, 35))
        send(alice, carol, "Hi", at(14, 40))

        body = client_for(alice).get(CONTACTS_URL).json()

        assert [c["counterpartId"] for c in body] == [str(carol.id), str(bob.id)]

    def test_no_conversations(self, make_user, client_for):
        response = client_for(make_user("dave")).get(CONTACTS_URL)
        assert response.status_code == 200
        assert response.json() == []

    def test_store_failure_is_a_500(self, alice, client_for):
        with patch("apps.chat.models.MessageQuerySet.involving", side_effect=DatabaseError("down")):
            response = client_for(alice).get(CONTACTS_URL)

        assert response.status_code == 500
        assert response.json() == {"error": "The service is temporarily unavailable"}

    def test_profile_lookup_failure_is_a_500(self, alice, bob, send, client_for):
        send(bob, alice, "hi", at(9, 0))

        with patch("apps.chat.services.profiles_by_id", side_effect=DatabaseError("down")):
            response = client_for(alice).get(CONTACTS_URL)

        assert response.status_code == 500
        assert response.json() == {"error": "The service is temporarily unavailable"}


class TestListAndConversation:

    def test_list_includes_sent_and_received_oldest_first(self, alice, bob, carol, send, client_for):
        send(alice, bob, "first", at(9, 0))
        send(carol, alice, "second", at(9, 5))
        send(bob, carol, "not mine", at(9, 10))

        body = client_for(alice).get(MESSAGES_URL).json()

        assert [m["message"] for m in body] == ["first", "second"]
        assert body[0]["sender"]["username"] == "alice"
        assert body[0]["receiver"]["username"] == "bob"
        assert body[0]["createdAt"] == "2024-02-15T09:00:00Z"

    def test_missing_profile_renders_as_null(self, alice, bob, send, client_for):
        send(bob, alice, "from a ghost", at(9, 0))
        type(bob).objects.filter(pk=bob.pk).delete()

        body = client_for(alice).get(MESSAGES_URL).json()

        assert body[0]["sender"] is None
        assert body[0]["senderId"] == str(bob.id)

    def test_conversation_only_has_the_pair(self, alice, bob, carol, send, client_for):
        send(alice, bob, "a->b", at(9, 0))
        send(bob, alice, "b->a", at(9, 1))
        send(alice, carol, "a->c", at(9, 2))

        body = client_for(alice).get(conversation_url(bob.id)).json()

        assert [m["message"] for m in body] == ["a->b", "b->a"]

    def test_conversation_with_malformed_id(self, alice, client_for):
        response = client_for(alice).get(conversation_url("not-a-uuid"))
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid user id"}

    def test_conversation_with_unknown_id_is_empty(self, alice, client_for):
        response = client_for(alice).get(conversation_url(uuid.uuid4()))
        assert response.status_code == 200
        assert response.json() == []


class TestCreate:

    def test_create_message(self, alice, bob, client_for):
        response = client_for(alice).post(
            MESSAGES_URL, {"receiverId": str(bob.id), "message": "  hi bob  "}, format="json"
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Message created"
        assert body["data"]["message"] == "hi bob"
        assert body["data"]["senderId"] == str(alice.id)
        assert body["data"]["receiverId"] == str(bob.id)
        assert Message.objects.filter(sender=alice, receiver=bob).count() == 1

    def test_new_message_shows_up_in_contacts(self, alice, bob, client_for):
        client_for(alice).post(MESSAGES_URL, {"receiverId": str(bob.id), "message": "hey"}, format="json")

        contacts = client_for(bob).get(CONTACTS_URL).json()

        assert [c["counterpartId"] for c in contacts] == [str(alice.id)]
        assert contacts[0]["lastMessage"] == "hey"

    def test_malformed_receiver(self, alice, client_for):
        response = client_for(alice).post(
            MESSAGES_URL, {"receiverId": "nope", "message": "hi"}, format="json"
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid receiver id"}

    def test_unknown_receiver(self, alice, client_for):
        response = client_for(alice).post(
            MESSAGES_URL, {"receiverId": str(uuid.uuid4()), "message": "hi"}, format="json"
        )
        assert response.status_code == 404
        assert response.json() == {"error": "Receiver not found"}

    def test_blank_body(self, alice, bob, client_for):
        response = client_for(alice).post(
            MESSAGES_URL, {"receiverId": str(bob.id), "message": "   "}, format="json"
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Message body is required"}

    @pytest.mark.parametrize("body", [123, ["hi"], {"text": "hi"}])
    def test_non_text_body(self, alice, bob, client_for, body):
        response = client_for(alice).post(
            MESSAGES_URL, {"receiverId": str(bob.id), "message": body}, format="json"
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Message body must be a string"}
        assert not Message.objects.exists()

    def test_message_to_self_is_allowed(self, alice, client_for):
        client = client_for(alice)
        response = client.post(MESSAGES_URL, {"receiverId": str(alice.id), "message": "memo"}, format="json")

        assert response.status_code == 201
        contacts = client.get(CONTACTS_URL).json()
        assert [c["counterpartId"] for c in contacts] == [str(alice.id)]


class TestDelete:

    def test_sender_can_delete(self, alice, bob, send, client_for):
        message = send(alice, bob, "oops", at(9, 0))

        response = client_for(alice).delete(message_url(message.id))

        assert response.status_code == 200
        assert response.json() == {"message": "Message deleted"}
        message.refresh_from_db()
        assert message.deleted is True
        assert message.deleted_at is not None

    def test_deleted_message_disappears_everywhere(self, alice, bob, send, client_for):
        send(alice, bob, "kept", at(9, 0))
        message = send(alice, bob, "oops", at(9, 5))
        client_for(alice).delete(message_url(message.id))

        bob_client = client_for(bob)
        assert [m["message"] for m in bob_client.get(MESSAGES_URL).json()] == ["kept"]
        assert bob_client.get(CONTACTS_URL).json()[0]["lastMessage"] == "kept"

    def test_receiver_cannot_delete(self, alice, bob, send, client_for):
        message = send(alice, bob, "mine", at(9, 0))

        response = client_for(bob).delete(message_url(message.id))

        assert response.status_code == 403
        assert "error" in response.json()
        message.refresh_from_db()
        assert message.deleted is False

    def test_unknown_message(self, alice, client_for):
        response = client_for(alice).delete(message_url(uuid.uuid4()))
        assert response.status_code == 404
        assert response.json() == {"error": "Message not found"}

    def test_deleting_twice(self, alice, bob, send, client_for):
        message = send(alice, bob, "oops", at(9, 0))
        client = client_for(alice)

        assert client.delete(message_url(message.id)).status_code == 200
        assert client.delete(message_url(message.id)).status_code == 404
