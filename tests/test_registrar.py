"""
Tests for administrator operations on bank membership
"""

import pytest

from kyc_registry.storage import InMemoryStorage
from kyc_registry.registry import RegistryStore
from kyc_registry.audit import AuditTrail, AuditEventType
from kyc_registry.events import EventDispatcher, EventRecorder, RegistryEventKind
from kyc_registry.registrar import Registrar
from kyc_registry.verification import VerificationEngine
from kyc_registry.errors import Unauthorized, NotFound


ADMIN = "0xadmin"


@pytest.fixture
def storage():
    """Create in-memory storage for tests"""
    return InMemoryStorage()


@pytest.fixture
def store(storage):
    return RegistryStore(storage, ADMIN)


@pytest.fixture
def audit(storage):
    return AuditTrail(storage)


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def registrar(store, audit, recorder):
    events = EventDispatcher()
    events.subscribe_all(recorder)
    return Registrar(store, events, audit)


class TestAddBank:

    def test_add_bank_defaults(self, registrar, store):
        bank = registrar.add_bank(ADMIN, "Bank A", "0x1", "REG-1")

        assert bank.identity == "0x1"
        assert bank.kyc_count == 0
        assert bank.complaints_reported == 0
        assert bank.eligible_to_vote is False
        assert store.get_bank("0x1") == bank
        assert store.number_of_banks == 1

    def test_only_admin_can_add(self, registrar, store):
        with pytest.raises(Unauthorized):
            registrar.add_bank("0x1", "Bank A", "0x1", "REG-1")
        assert store.get_bank("0x1") is None
        assert store.number_of_banks == 0

    def test_readding_identity_overwrites_and_counts_again(self, registrar, store):
        registrar.add_bank(ADMIN, "Bank A", "0x1", "REG-1")
        registrar.set_voting_eligibility(ADMIN, "0x1", True)

        registrar.add_bank(ADMIN, "Bank A Renamed", "0x1", "REG-9")

        bank = store.get_bank("0x1")
        assert bank.name == "Bank A Renamed"
        assert bank.eligible_to_vote is False
        assert store.number_of_banks == 2

    def test_add_bank_is_audited_and_published(self, registrar, audit, recorder):
        registrar.add_bank(ADMIN, "Bank A", "0x1", "REG-1")

        events = audit.get_events_by_type(AuditEventType.BANK_ADDED)
        assert len(events) == 1
        assert events[0].entity_id == "0x1"
        assert events[0].user_id == ADMIN
        assert [e.payload for e in recorder.of_kind(RegistryEventKind.BANK_ADDED)] == ["0x1"]


class TestVotingEligibility:

    def test_grant_and_revoke(self, registrar, store):
        registrar.add_bank(ADMIN, "Bank A", "0x1", "REG-1")

        registrar.set_voting_eligibility(ADMIN, "0x1", True)
        assert store.get_bank("0x1").eligible_to_vote is True

        registrar.set_voting_eligibility(ADMIN, "0x1", False)
        assert store.get_bank("0x1").eligible_to_vote is False

    def test_grant_is_idempotent(self, registrar, store):
        registrar.add_bank(ADMIN, "Bank A", "0x1", "REG-1")

        registrar.set_voting_eligibility(ADMIN, "0x1", True)
        once = store.get_bank("0x1")
        registrar.set_voting_eligibility(ADMIN, "0x1", True)
        twice = store.get_bank("0x1")

        assert once.eligible_to_vote == twice.eligible_to_vote
        assert once.complaints_reported == twice.complaints_reported
        assert once.kyc_count == twice.kyc_count
        assert store.number_of_banks == 1

    def test_requires_admin(self, registrar):
        registrar.add_bank(ADMIN, "Bank A", "0x1", "REG-1")
        with pytest.raises(Unauthorized):
            registrar.set_voting_eligibility("0x1", "0x1", True)

    def test_unknown_bank(self, registrar):
        with pytest.raises(NotFound):
            registrar.set_voting_eligibility(ADMIN, "0x9", True)

    def test_admin_check_precedes_presence_check(self, registrar):
        with pytest.raises(Unauthorized):
            registrar.set_voting_eligibility("0x5", "0x9", True)


class TestRemoveBank:

    def test_remove_bank_keeps_counter(self, registrar, store):
        registrar.add_bank(ADMIN, "Bank A", "0x1", "REG-1")
        registrar.add_bank(ADMIN, "Bank B", "0x2", "REG-2")

        registrar.remove_bank(ADMIN, "0x1")

        assert store.get_bank("0x1") is None
        assert store.number_of_banks == 2

    def test_remove_unknown_bank(self, registrar):
        with pytest.raises(NotFound):
            registrar.remove_bank(ADMIN, "0x9")

    def test_requires_admin(self, registrar, store):
        registrar.add_bank(ADMIN, "Bank A", "0x1", "REG-1")
        with pytest.raises(Unauthorized):
            registrar.remove_bank("0x1", "0x1")
        assert store.get_bank("0x1") is not None

    def test_removed_bank_customers_remain(self, registrar, store):
        engine = VerificationEngine(store)
        registrar.add_bank(ADMIN, "Bank A", "0x1", "REG-1")
        registrar.add_bank(ADMIN, "Bank B", "0x2", "REG-2")
        registrar.set_voting_eligibility(ADMIN, "0x1", True)
        registrar.set_voting_eligibility(ADMIN, "0x2", True)
        engine.register_customer("0x1", "alice", "D-alice")
        engine.file_request("0x1", "bob", "D-bob")

        registrar.remove_bank(ADMIN, "0x1")

        alice = engine.get_customer_details("0x2", "alice")
        assert alice.bank == "0x1"
        assert store.get_request("bob").bank == "0x1"
        assert [c.user_name for c in store.customers_owned_by("0x1")] == ["alice"]

    def test_removed_bank_loses_access(self, registrar, store):
        engine = VerificationEngine(store)
        registrar.add_bank(ADMIN, "Bank A", "0x1", "REG-1")
        registrar.set_voting_eligibility(ADMIN, "0x1", True)
        registrar.remove_bank(ADMIN, "0x1")

        with pytest.raises(Unauthorized):
            engine.register_customer("0x1", "alice", "D-alice")
