"""
Tests for access control guards
"""

import pytest
from datetime import datetime, timezone

from kyc_registry.storage import InMemoryStorage
from kyc_registry.registry import RegistryStore, Bank, Customer
from kyc_registry.errors import Unauthorized, Ineligible, NotFound, KYCRegistryError
from kyc_registry.guards import (
    require_admin, require_bank, require_voting_eligible,
    require_customer_present, require_bank_present, require_eligible_bank
)


ADMIN = "0xadmin"


@pytest.fixture
def store():
    store = RegistryStore(InMemoryStorage(), ADMIN)
    now = datetime.now(timezone.utc)
    store.put_bank(Bank(id="0x1", created_at=now, updated_at=now, identity="0x1",
                        name="Bank A", reg_number="REG-1", eligible_to_vote=True))
    store.put_bank(Bank(id="0x2", created_at=now, updated_at=now, identity="0x2",
                        name="Bank B", reg_number="REG-2"))
    store.put_customer(Customer(id="alice", created_at=now, updated_at=now,
                                user_name="alice", data="D1", bank="0x1"))
    return store


class TestGuards:

    def test_require_admin(self, store):
        require_admin(store, ADMIN)
        with pytest.raises(Unauthorized):
            require_admin(store, "0x1")

    def test_require_bank(self, store):
        assert require_bank(store, "0x2").identity == "0x2"
        with pytest.raises(Unauthorized):
            require_bank(store, "0x9")

    def test_admin_is_not_a_bank(self, store):
        with pytest.raises(Unauthorized):
            require_bank(store, ADMIN)

    def test_require_voting_eligible(self, store):
        assert require_voting_eligible(store, "0x1").eligible_to_vote
        with pytest.raises(Ineligible):
            require_voting_eligible(store, "0x2")

    def test_require_customer_present(self, store):
        assert require_customer_present(store, "alice").bank == "0x1"
        with pytest.raises(NotFound):
            require_customer_present(store, "bob")

    def test_require_bank_present(self, store):
        require_bank_present(store, "0x2")
        with pytest.raises(NotFound):
            require_bank_present(store, "0x9")

    def test_eligible_bank_checks_membership_first(self, store):
        # A stranger is unauthorized, not merely ineligible
        with pytest.raises(Unauthorized):
            require_eligible_bank(store, "0x9")
        with pytest.raises(Ineligible):
            require_eligible_bank(store, "0x2")
        assert require_eligible_bank(store, "0x1").identity == "0x1"

    def test_errors_share_base_class_and_codes(self):
        assert issubclass(Unauthorized, KYCRegistryError)
        assert Unauthorized("x").code == "unauthorized"
        assert Ineligible("x").code == "ineligible"
        assert NotFound("x").message == "x"
