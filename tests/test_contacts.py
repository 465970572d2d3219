"""
Contact aggregation: one entry per counterpart, latest message wins,
newest conversation first.
"""
import uuid
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from django.db import DatabaseError

from apps.chat.services import latest_by_counterpart, list_contacts
from apps.core.exceptions import StoreUnavailable
from tests.conftest import at


def _msg(sender, receiver, created_at, body="", msg_id=None):
    return SimpleNamespace(
        id=msg_id or uuid.uuid4(),
        sender_id=sender,
        receiver_id=receiver,
        created_at=created_at,
        body=body,
    )


class TestLatestByCounterpart:
    """Pure fold, no database."""

    def setup_method(self):
        self.me = uuid.uuid4()
        self.other = uuid.uuid4()
        self.third = uuid.uuid4()

    def test_sent_and_received_fold_into_one_entry(self):
        messages = [
            _msg(self.me, self.other, at(14, 30), "Hello 1"),
            _msg(self.other, self.me, at(14, 35), "Hello 2"),
        ]

        latest = latest_by_counterpart(self.me, messages)

        assert list(latest) == [self.other]
        assert latest[self.other].body == "Hello 2"

    def test_result_does_not_depend_on_input_order(self):
        messages = [
            _msg(self.other, self.me, at(14, 35), "newest"),
            _msg(self.me, self.other, at(14, 30), "older"),
            _msg(self.me, self.other, at(14, 32), "middle"),
        ]

        assert latest_by_counterpart(self.me, messages)[self.other].body == "newest"
        assert latest_by_counterpart(self.me, reversed(messages))[self.other].body == "newest"

    def test_equal_timestamps_keep_last_seen(self):
        messages = [
            _msg(self.me, self.other, at(9, 0), "first"),
            _msg(self.other, self.me, at(9, 0), "second"),
        ]

        assert latest_by_counterpart(self.me, messages)[self.other].body == "second"

    def test_one_entry_per_counterpart(self):
        messages = [
            _msg(self.me, self.other, at(10, 0)),
            _msg(self.other, self.me, at(10, 5)),
            _msg(self.third, self.me, at(10, 1)),
            _msg(self.me, self.third, at(10, 2)),
            _msg(self.me, self.other, at(10, 3)),
        ]

        assert set(latest_by_counterpart(self.me, messages)) == {self.other, self.third}

    def test_self_message_counts_self_as_counterpart(self):
        latest = latest_by_counterpart(self.me, [_msg(self.me, self.me, at(8, 0), "note")])
        assert list(latest) == [self.me]

    def test_empty_log(self):
        assert latest_by_counterpart(self.me, []) == {}


@pytest.mark.django_db
class TestListContacts:

    def test_latest_message_wins(self, alice, bob, send):
        send(alice, bob, "Hello 1", at(14, 30))
        send(bob, alice, "Hello 2", at(14, 35))

        contacts = list_contacts(user=alice)

        assert len(contacts) == 1
        contact = contacts[0]
        assert contact.counterpart_id == bob.id
        assert contact.username == "bob"
        assert contact.last_message == "Hello 2"
        assert contact.last_message_time == at(14, 35)
        assert contact.last_message_sender_id == bob.id

    def test_ordered_by_most_recent_activity(self, alice, bob, carol, send):
        send(alice, bob, "Hello 1", at(14, 30))
        send(bob, alice, "Hello 2", at(14, 35))
        send(alice, carol, "Hi Carol", at(14, 40))

        contacts = list_contacts(user=alice)

        assert [c.counterpart_id for c in contacts] == [carol.id, bob.id]
        assert [c.last_message_time for c in contacts] == [at(14, 40), at(14, 35)]

    def test_counterpart_sees_the_mirror_entry(self, alice, bob, send):
        send(alice, bob, "Hello 1", at(14, 30))
        send(bob, alice, "Hello 2", at(14, 35))

        contacts = list_contacts(user=bob)

        assert [c.counterpart_id for c in contacts] == [alice.id]
        assert contacts[0].last_message == "Hello 2"

    def test_no_messages_gives_empty_list(self, make_user):
        assert list_contacts(user=make_user("dave")) == []

    def test_many_messages_one_entry_each(self, alice, bob, carol, send):
        for minute in range(10):
            send(alice, bob, f"to bob {minute}", at(10, minute))
            send(carol, alice, f"from carol {minute}", at(11, minute))

        contacts = list_contacts(user=alice)

        assert len(contacts) == 2
        assert contacts[0].counterpart_id == carol.id
        assert contacts[0].last_message == "from carol 9"
        assert contacts[1].last_message == "to bob 9"

    def test_deleted_messages_are_ignored(self, alice, bob, carol, send):
        send(alice, bob, "kept", at(9, 0))
        send(bob, alice, "retracted", at(9, 30), deleted=True)
        send(carol, alice, "only deleted", at(10, 0), deleted=True)

        contacts = list_contacts(user=alice)

        assert [c.counterpart_id for c in contacts] == [bob.id]
        assert contacts[0].last_message == "kept"

    def test_other_peoples_messages_are_ignored(self, alice, bob, carol, send):
        send(bob, carol, "not for alice", at(12, 0))
        assert list_contacts(user=alice) == []

    def test_equal_timestamps_are_deterministic(self, alice, bob, send):
        send(alice, bob, "one", at(9, 0))
        send(bob, alice, "two", at(9, 0))

        first = list_contacts(user=alice)[0].last_message
        for _ in range(3):
            assert list_contacts(user=alice)[0].last_message == first

    def test_deleted_account_is_omitted(self, alice, bob, carol, send):
        send(alice, bob, "to bob", at(9, 0))
        send(carol, alice, "from carol", at(9, 5))
        type(carol).objects.filter(pk=carol.pk).delete()

        contacts = list_contacts(user=alice)

        assert [c.counterpart_id for c in contacts] == [bob.id]

    def test_two_queries_regardless_of_volume(self, alice, make_user, send, django_assert_num_queries):
        for i in range(5):
            other = make_user(f"peer{i}")
            for minute in range(4):
                send(other, alice, "ping", at(8 + i, minute))

        with django_assert_num_queries(2):
            contacts = list_contacts(user=alice)

        assert len(contacts) == 5

    def test_store_failure_raises_and_skips_profile_lookup(self, alice):
        with patch("apps.chat.models.MessageQuerySet.involving", side_effect=DatabaseError("down")), \
                patch("apps.chat.services.profiles_by_id") as profiles:
            with pytest.raises(StoreUnavailable):
                list_contacts(user=alice)

        profiles.assert_not_called()

    def test_profile_lookup_failure_raises(self, alice, bob, send):
        send(bob, alice, "hi", at(9, 0))

        with patch("apps.chat.services.profiles_by_id", side_effect=DatabaseError("down")):
            with pytest.raises(StoreUnavailable):
                list_contacts(user=alice)
