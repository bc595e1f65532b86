"""
Registry Store Module

Sole owner of the three registry mappings (customers, banks, pending KYC
requests) and of the registry-wide bank counter. Every read returns either a
full record or None, never a zero-valued placeholder, so presence checks
can't be fooled by a record with default fields.
"""

from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Callable, List, Optional, Iterator, Tuple
from contextlib import contextmanager
import threading

from .storage import StorageInterface, StorageRecord


@dataclass
class Customer(StorageRecord):
    """
    Customer known to the registry, keyed by user name

    ``bank`` is the identity of the registering bank. A customer record
    exists only while it has an owner.
    """
    user_name: str
    data: str
    bank: str
    verified: bool = False
    upvotes: int = 0
    downvotes: int = 0

    def __post_init__(self):
        if not self.bank:
            raise ValueError("Customer must have an owning bank")
        if self.upvotes < 0 or self.downvotes < 0:
            raise ValueError("Vote counters cannot be negative")


@dataclass
class Bank(StorageRecord):
    """Member institution, keyed by its identity"""
    identity: str
    name: str
    reg_number: str
    complaints_reported: int = 0
    kyc_count: int = 0
    eligible_to_vote: bool = False

    def __post_init__(self):
        if not self.identity:
            raise ValueError("Bank identity is required")
        if self.complaints_reported < 0 or self.kyc_count < 0:
            raise ValueError("Bank counters cannot be negative")


@dataclass
class KycRequest(StorageRecord):
    """Pending verification request filed by a bank"""
    user_name: str
    bank: str
    data: str


class RegistryStore:
    """
    Keeper of customers, banks and pending requests

    All state lives in the injected storage backend; the store itself only
    holds the administrator identity, the lock that serialises operations and
    the side effects waiting for the current unit to commit.
    """

    CUSTOMERS_TABLE = "customers"
    BANKS_TABLE = "banks"
    REQUESTS_TABLE = "kyc_requests"
    META_TABLE = "registry_meta"
    BANK_COUNT_KEY = "number_of_banks"

    def __init__(self, storage: StorageInterface, admin_identity: str):
        if not admin_identity:
            raise ValueError("Administrator identity is required")
        self.storage = storage
        self.admin_identity = admin_identity
        self._lock = threading.RLock()
        self._depth = 0
        self._on_commit: List[Tuple[Callable, tuple, dict]] = []

    @contextmanager
    def atomic(self) -> Iterator["RegistryStore"]:
        """
        Run a block as one isolated unit

        Holds the registry lock and a storage transaction; any exception
        rolls back everything written inside the block. Callbacks queued with
        ``on_commit`` run once the outermost block commits and are dropped
        when the block that queued them fails.
        """
        with self._lock:
            mark = len(self._on_commit)
            self._depth += 1
            try:
                with self.storage.atomic():
                    yield self
            except BaseException:
                del self._on_commit[mark:]
                raise
            finally:
                self._depth -= 1

            if self._depth == 0:
                pending, self._on_commit = self._on_commit, []
                for callback, args, kwargs in pending:
                    callback(*args, **kwargs)

    def on_commit(self, callback: Callable, *args, **kwargs) -> None:
        """Defer a side effect until the current unit commits"""
        with self._lock:
            if self._depth == 0:
                callback(*args, **kwargs)
            else:
                self._on_commit.append((callback, args, kwargs))

    # Customers

    def get_customer(self, user_name: str) -> Optional[Customer]:
        data = self.storage.load(self.CUSTOMERS_TABLE, user_name)
        if data is None:
            return None
        return Customer.from_dict(data)

    def put_customer(self, customer: Customer) -> None:
        customer.updated_at = datetime.now(timezone.utc)
        self.storage.save(self.CUSTOMERS_TABLE, customer.user_name, customer.to_dict())

    def delete_customer(self, user_name: str) -> bool:
        return self.storage.delete(self.CUSTOMERS_TABLE, user_name)

    def list_customers(self) -> List[Customer]:
        return [Customer.from_dict(d) for d in self.storage.load_all(self.CUSTOMERS_TABLE)]

    def customers_owned_by(self, identity: str) -> List[Customer]:
        """Customers registered by a bank, including orphans of removed banks"""
        found = self.storage.find(self.CUSTOMERS_TABLE, {"bank": identity})
        return [Customer.from_dict(d) for d in found]

    # Banks

    def get_bank(self, identity: str) -> Optional[Bank]:
        data = self.storage.load(self.BANKS_TABLE, identity)
        if data is None:
            return None
        return Bank.from_dict(data)

    def put_bank(self, bank: Bank) -> None:
        bank.updated_at = datetime.now(timezone.utc)
        self.storage.save(self.BANKS_TABLE, bank.identity, bank.to_dict())

    def delete_bank(self, identity: str) -> bool:
        return self.storage.delete(self.BANKS_TABLE, identity)

    def list_banks(self) -> List[Bank]:
        return [Bank.from_dict(d) for d in self.storage.load_all(self.BANKS_TABLE)]

    # Pending requests

    def get_request(self, key: str) -> Optional[KycRequest]:
        data = self.storage.load(self.REQUESTS_TABLE, key)
        if data is None:
            return None
        return KycRequest.from_dict(data)

    def put_request(self, request: KycRequest) -> None:
        request.updated_at = datetime.now(timezone.utc)
        self.storage.save(self.REQUESTS_TABLE, request.user_name, request.to_dict())

    def delete_request(self, key: str) -> bool:
        return self.storage.delete(self.REQUESTS_TABLE, key)

    def find_requests_by_data(self, data: str) -> List[KycRequest]:
        found = self.storage.find(self.REQUESTS_TABLE, {"data": data})
        return [KycRequest.from_dict(d) for d in found]

    def list_requests(self) -> List[KycRequest]:
        return [KycRequest.from_dict(d) for d in self.storage.load_all(self.REQUESTS_TABLE)]

    # Bank counter

    @property
    def number_of_banks(self) -> int:
        data = self.storage.load(self.META_TABLE, self.BANK_COUNT_KEY)
        if data is None:
            return 0
        return int(data["value"])

    def increment_bank_count(self) -> int:
        """Bump the bank counter. It is never decremented."""
        with self._lock:
            value = self.number_of_banks + 1
            self.storage.save(self.META_TABLE, self.BANK_COUNT_KEY, {"value": value})
            return value

    def is_admin(self, identity: str) -> bool:
        return identity == self.admin_identity
