"""
Verification Engine Module

Bank-facing registry operations: filing KYC requests, registering and
amending customers, voting on their KYC status and reporting misbehaving
banks.

A customer's ``verified`` flag is derived from its vote counters after every
vote (see ``compute_verified``). A bank loses its vote once its complaints
exceed a third of the registered banks (see ``should_suspend``).
"""

from datetime import datetime, timezone
from typing import Optional

from .registry import RegistryStore, Customer, Bank, KycRequest
from .guards import (
    require_bank,
    require_eligible_bank,
    require_customer_present,
    require_bank_present,
)
from .errors import AlreadyExists, DuplicateRequest, NotFound
from .events import EventDispatcher, RegistryEventKind
from .audit import AuditTrail, AuditEventType
from .logging_config import get_logger, log_action


logger = get_logger("kyc_registry.verification")


def compute_verified(upvotes: int, downvotes: int, number_of_banks: int) -> bool:
    """
    KYC status from vote counters

    Majority first, then the downvote threshold overrides it: more than a
    third of the registered banks (floor division) voting down always leaves
    the customer unverified.
    """
    verified = upvotes > downvotes
    if downvotes > number_of_banks // 3:
        verified = False
    return verified


def should_suspend(complaints_reported: int, number_of_banks: int) -> bool:
    """True once complaints exceed a third of the registered banks"""
    return complaints_reported > number_of_banks // 3


class VerificationEngine:
    """Customer lifecycle, voting and bank complaints"""

    def __init__(
        self,
        store: RegistryStore,
        events: Optional[EventDispatcher] = None,
        audit_trail: Optional[AuditTrail] = None
    ):
        self.store = store
        self.events = events or EventDispatcher()
        self.audit_trail = audit_trail

    def _audit(self, event_type: AuditEventType, entity_type: str, entity_id: str,
               caller: str, **metadata) -> None:
        if self.audit_trail:
            self.audit_trail.log_event(
                event_type=event_type,
                entity_type=entity_type,
                entity_id=entity_id,
                metadata=metadata,
                user_id=caller
            )

    # Requests

    def file_request(self, caller: str, user_name: str, data: str) -> KycRequest:
        """
        File a KYC request for a customer

        Any member bank may file, eligible or not. The duplicate check is
        keyed by the data value, not the user name: it rejects the call when
        a pending request is stored under that value or already carries it.
        Refiling for a user name with new data is not a duplicate.
        """
        with self.store.atomic():
            bank = require_bank(self.store, caller)

            if self.store.get_request(data) is not None or self.store.find_requests_by_data(data):
                raise DuplicateRequest(f"A pending request already exists for {data}")

            now = datetime.now(timezone.utc)
            request = KycRequest(
                id=user_name,
                created_at=now,
                updated_at=now,
                user_name=user_name,
                bank=caller,
                data=data
            )
            self.store.put_request(request)

            bank.kyc_count += 1
            self.store.put_bank(bank)

            self._audit(AuditEventType.KYC_REQUEST_FILED, "kyc_request", user_name, caller,
                        kyc_count=bank.kyc_count)
            self.store.on_commit(self.events.emit, RegistryEventKind.KYC_REQUEST_FILED, user_name,
                                 caller=caller)

        log_action(logger, "info", "KYC request filed", caller=caller,
                   action="file_request", resource=user_name)
        return request

    # Customers

    def register_customer(self, caller: str, user_name: str, data: str) -> Customer:
        with self.store.atomic():
            require_eligible_bank(self.store, caller)

            if self.store.get_customer(user_name) is not None:
                raise AlreadyExists(f"Customer {user_name} already exists")

            now = datetime.now(timezone.utc)
            customer = Customer(
                id=user_name,
                created_at=now,
                updated_at=now,
                user_name=user_name,
                data=data,
                bank=caller,
                verified=False,
                upvotes=0,
                downvotes=0
            )
            self.store.put_customer(customer)

            self._audit(AuditEventType.CUSTOMER_REGISTERED, "customer", user_name, caller)
            self.store.on_commit(self.events.emit, RegistryEventKind.CUSTOMER_REGISTERED, user_name,
                                 caller=caller)

        log_action(logger, "info", "Customer registered", caller=caller,
                   action="register_customer", resource=user_name)
        return customer

    def amend_customer(self, caller: str, user_name: str, new_data: str) -> Customer:
        """
        Replace a customer's data

        Votes collected for the old data no longer apply: both counters and
        the verified flag are reset, and a pending request for the customer
        is discarded.
        """
        with self.store.atomic():
            require_eligible_bank(self.store, caller)
            customer = require_customer_present(self.store, user_name)

            customer.data = new_data
            customer.upvotes = 0
            customer.downvotes = 0
            customer.verified = False
            self.store.put_customer(customer)

            discarded = self.store.delete_request(user_name)

            self._audit(AuditEventType.CUSTOMER_AMENDED, "customer", user_name, caller,
                        request_discarded=discarded)
            if discarded:
                self._audit(AuditEventType.KYC_REQUEST_DISCARDED, "kyc_request", user_name, caller)
            self.store.on_commit(self.events.emit, RegistryEventKind.CUSTOMER_AMENDED, user_name,
                                 caller=caller)

        log_action(logger, "info", "Customer data amended", caller=caller,
                   action="amend_customer", resource=user_name)
        return customer

    def remove_customer(self, caller: str, user_name: str) -> None:
        with self.store.atomic():
            require_eligible_bank(self.store, caller)
            require_customer_present(self.store, user_name)

            self.store.delete_customer(user_name)

            self._audit(AuditEventType.CUSTOMER_REMOVED, "customer", user_name, caller)
            self.store.on_commit(self.events.emit, RegistryEventKind.CUSTOMER_REMOVED, user_name,
                                 caller=caller)

        log_action(logger, "info", "Customer removed", caller=caller,
                   action="remove_customer", resource=user_name)

    # Voting

    def upvote(self, caller: str, user_name: str) -> Customer:
        return self._vote(caller, user_name, upvote=True)

    def downvote(self, caller: str, user_name: str) -> Customer:
        return self._vote(caller, user_name, upvote=False)

    def _vote(self, caller: str, user_name: str, upvote: bool) -> Customer:
        with self.store.atomic():
            require_eligible_bank(self.store, caller)
            customer = require_customer_present(self.store, user_name)

            if upvote:
                customer.upvotes += 1
            else:
                customer.downvotes += 1

            previous = customer.verified
            customer.verified = compute_verified(
                customer.upvotes, customer.downvotes, self.store.number_of_banks
            )
            self.store.put_customer(customer)

            self._audit(
                AuditEventType.CUSTOMER_UPVOTED if upvote else AuditEventType.CUSTOMER_DOWNVOTED,
                "customer", user_name, caller,
                upvotes=customer.upvotes, downvotes=customer.downvotes
            )
            if previous != customer.verified:
                self._audit(AuditEventType.KYC_STATUS_CHANGED, "customer", user_name, caller,
                            old_status=previous, new_status=customer.verified)
            self.store.on_commit(
                self.events.emit,
                RegistryEventKind.CUSTOMER_VOTED,
                f"{user_name}:{'up' if upvote else 'down'}",
                caller=caller
            )

        log_action(logger, "info", f"Customer {'up' if upvote else 'down'}voted", caller=caller,
                   action="upvote" if upvote else "downvote", resource=user_name,
                   extra={"verified": customer.verified})
        return customer

    # Complaints

    def report_bank(self, caller: str, identity: str, reported_name: str) -> Bank:
        """
        Lodge a complaint against a bank

        Any member bank may report. Crossing the complaint threshold clears
        the target's voting eligibility; complaints never restore it.
        Events reach subscribers only once the enclosing unit commits.
        """
        with self.store.atomic():
            require_bank(self.store, caller)
            bank = require_bank_present(self.store, identity)

            self.store.on_commit(self.events.emit, RegistryEventKind.BANK_REPORTED, reported_name,
                                 caller=caller)

            bank.complaints_reported += 1
            suspended = False
            if should_suspend(bank.complaints_reported, self.store.number_of_banks):
                suspended = bank.eligible_to_vote
                bank.eligible_to_vote = False
            self.store.put_bank(bank)

            self._audit(AuditEventType.BANK_REPORTED, "bank", identity, caller,
                        reported_name=reported_name,
                        complaints_reported=bank.complaints_reported)
            if suspended:
                self._audit(AuditEventType.BANK_SUSPENDED, "bank", identity, caller,
                            complaints_reported=bank.complaints_reported)
                self.store.on_commit(self.events.emit, RegistryEventKind.BANK_SUSPENDED, identity,
                                     caller=caller)

        if suspended:
            log_action(logger, "warning", "Bank suspended from voting", caller=caller,
                       action="report_bank", resource=identity,
                       extra={"complaints_reported": bank.complaints_reported})
        else:
            log_action(logger, "info", "Bank reported", caller=caller,
                       action="report_bank", resource=identity)
        return bank

    # Reads

    def get_bank_complaint_count(self, caller: str, identity: str) -> int:
        with self.store.atomic():
            require_eligible_bank(self.store, caller)
            return require_bank_present(self.store, identity).complaints_reported

    def get_bank_details(self, caller: str, identity: str) -> Bank:
        with self.store.atomic():
            require_eligible_bank(self.store, caller)
            return require_bank_present(self.store, identity)

    def get_customer_details(self, caller: str, user_name: str) -> Customer:
        with self.store.atomic():
            require_eligible_bank(self.store, caller)
            return require_customer_present(self.store, user_name)

    def get_customer_status(self, caller: str, user_name: str) -> bool:
        return self.get_customer_details(caller, user_name).verified

    def get_request_details(self, caller: str, user_name: str) -> KycRequest:
        with self.store.atomic():
            require_eligible_bank(self.store, caller)
            request = self.store.get_request(user_name)
            if request is None:
                raise NotFound(f"No pending request for {user_name}")
            return request
