import datetime

import pytest
from django.contrib.auth import get_user_model
from graphql_jwt.shortcuts import get_token
from rest_framework.test import APIClient

from apps.chat.models import Message

User = get_user_model()


def at(hour, minute, second=0):
    """A fixed UTC instant on 2024-02-15."""
    return datetime.datetime(2024, 2, 15, hour, minute, second, tzinfo=datetime.timezone.utc)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(username=None, first_name="Test", last_name="User", password="s3cure-Passw0rd!"):
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        return User.objects.create_user(
            username=username,
            password=password,
            first_name=first_name,
            last_name=last_name,
        )
    return _make


@pytest.fixture
def send(db):
    def _send(sender, receiver, body, created_at=None, **extra):
        fields = {"body": body, "sender": sender, "receiver": receiver, **extra}
        if created_at is not None:
            fields["created_at"] = created_at
        return Message.objects.create(**fields)
    return _send


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for():
    def _client(user):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {get_token(user)}")
        return client
    return _client


@pytest.fixture
def alice(make_user):
    return make_user("alice", "Alice", "Martin")


@pytest.fixture
def bob(make_user):
    return make_user("bob", "Bob", "Durand")


@pytest.fixture
def carol(make_user):
    return make_user("carol", "Carol", "Bernard")
