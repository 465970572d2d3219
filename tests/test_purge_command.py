from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from django.utils import timezone

from apps.chat.models import Message
from tests.conftest import at

pytestmark = pytest.mark.django_db


def test_purges_only_old_tombstones(alice, bob, send):
    now = timezone.now()
    old = send(alice, bob, "old", at(9, 0), deleted=True, deleted_at=now - timedelta(days=45))
    recent = send(alice, bob, "recent", at(9, 1), deleted=True, deleted_at=now - timedelta(days=2))
    live = send(alice, bob, "live", at(9, 2))
    out = StringIO()

    call_command("purge_deleted_messages", stdout=out)

    remaining = set(Message.objects.values_list("pk", flat=True))
    assert remaining == {recent.pk, live.pk}
    assert old.pk not in remaining
    assert "Purged 1 messages." in out.getvalue()


def test_days_option(alice, bob, send):
    send(alice, bob, "recent", at(9, 1), deleted=True, deleted_at=timezone.now() - timedelta(days=2))

    call_command("purge_deleted_messages", "--days", "1", stdout=StringIO())

    assert not Message.objects.exists()


def test_negative_days():
    with pytest.raises(CommandError):
        call_command("purge_deleted_messages", "--days", "-1", stdout=StringIO())
