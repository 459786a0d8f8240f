"""Tests for the in-memory person store."""

import threading

import pytest

from mentormatch.errors import DuplicateEmailError, PersonNotFoundError, VersionConflictError
from mentormatch.profile.models import UserType
from mentormatch.storage.store import InMemoryPersonStore
from tests.factories import make_client, make_volunteer


@pytest.fixture
def store():
    return InMemoryPersonStore([
        make_client("alice", email="Alice@Example.org"),
        make_client("bob", email="bob@example.org", matched_volunteer_id="victor"),
        make_volunteer("victor", email="victor@example.org", matched_client_ids=["bob"]),
    ])


class TestInMemoryPersonStore:
    def test_get(self, store):
        assert store.get("alice").name == "alice"
        assert store.get("nobody") is None
        assert len(store) == 3
        assert "victor" in store
        assert "nobody" not in store

    def test_get_by_email_is_case_insensitive(self, store):
        assert store.get_by_email("alice@example.org").id == "alice"
        assert store.get_by_email(" ALICE@example.org ").id == "alice"
        assert store.get_by_email("nobody@example.org") is None

    def test_listing_keeps_insertion_order(self, store):
        store.add(make_client("carol"))
        assert [p.id for p in store.list_clients()] == ["alice", "bob", "carol"]
        assert [p.id for p in store.list_clients(unmatched_only=True)] == ["alice", "carol"]
        assert [p.id for p in store.list_volunteers()] == ["victor"]
        assert [p.id for p in store.list_all()] == ["alice", "bob", "victor", "carol"]

    def test_duplicate_id_rejected(self, store):
        with pytest.raises(ValueError):
            store.add(make_client("alice"))

    def test_duplicate_email_rejected(self, store):
        with pytest.raises(DuplicateEmailError):
            store.add(make_volunteer("wendy", email="alice@EXAMPLE.org"))

    def test_people_without_email_are_allowed(self, store):
        store.add(make_client("carol"))
        store.add(make_client("dave"))
        assert len(store) == 5

    def test_update_bumps_version(self, store):
        stored = store.update(store.get("alice").model_copy(update={"name": "Alice"}))
        assert stored.version == 1
        assert store.get("alice").name == "Alice"
        assert store.get("alice") is stored

    def test_stale_update_rejected(self, store):
        stale = store.get("alice")
        store.update(stale.model_copy(update={"name": "first"}))

        with pytest.raises(VersionConflictError) as exc_info:
            store.update(stale.model_copy(update={"name": "second"}))

        assert exc_info.value.expected == 0
        assert exc_info.value.actual == 1
        assert store.get("alice").name == "first"

    def test_update_missing_record(self, store):
        with pytest.raises(PersonNotFoundError):
            store.update(make_client("nobody"))

    def test_update_cannot_change_role(self, store):
        alice = store.get("alice")
        with pytest.raises(ValueError):
            store.update(alice.model_copy(update={"user_type": UserType.VOLUNTEER}))

    def test_update_many_is_all_or_nothing(self, store):
        alice = store.get("alice")
        victor = store.get("victor")
        store.update(victor.model_copy(update={"name": "V"}))

        with pytest.raises(VersionConflictError):
            store.update_many([alice.with_volunteer("victor"), victor.with_client("alice")])

        assert store.get("alice").matched_volunteer_id is None
        assert store.get("alice").version == 0

    def test_update_many_rejects_repeated_record(self, store):
        alice = store.get("alice")
        with pytest.raises(ValueError):
            store.update_many([alice, alice])

    def test_email_change_moves_index(self, store):
        alice = store.get("alice")
        store.update(alice.model_copy(update={"email": "alice@new.org"}))

        assert store.get_by_email("alice@new.org").id == "alice"
        assert store.get_by_email("alice@example.org") is None
        store.add(make_client("alice2", email="alice@example.org"))

    def test_email_collision_on_update(self, store):
        bob = store.get("bob")
        with pytest.raises(DuplicateEmailError):
            store.update(bob.model_copy(update={"email": "ALICE@example.org"}))

    def test_delete_clears_indices(self, store):
        store.delete("alice")

        assert store.get("alice") is None
        assert store.get_by_email("alice@example.org") is None
        assert [p.id for p in store.list_clients()] == ["bob"]
        with pytest.raises(PersonNotFoundError):
            store.delete("alice")

    def test_concurrent_writers_only_one_wins(self, store):
        alice = store.get("alice")
        errors = []

        def write(name):
            try:
                store.update(alice.model_copy(update={"name": name}))
            except VersionConflictError as e:
                errors.append(e)

        threads = [threading.Thread(target=write, args=(f"n{i}",)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(errors) == 7
        assert store.get("alice").version == 1
