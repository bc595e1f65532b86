"""
Registrar Module

Administrator-only management of member banks: onboarding, removal and
voting eligibility.
"""

from datetime import datetime, timezone
from typing import Optional

from .registry import RegistryStore, Bank
from .guards import require_admin, require_bank_present
from .events import EventDispatcher, RegistryEventKind
from .audit import AuditTrail, AuditEventType
from .logging_config import get_logger, log_action


logger = get_logger("kyc_registry.registrar")


class Registrar:
    """Bank membership operations, callable only by the administrator"""

    def __init__(
        self,
        store: RegistryStore,
        events: Optional[EventDispatcher] = None,
        audit_trail: Optional[AuditTrail] = None
    ):
        self.store = store
        self.events = events or EventDispatcher()
        self.audit_trail = audit_trail

    def add_bank(self, caller: str, name: str, identity: str, reg_number: str) -> Bank:
        """
        Onboard a bank

        The new bank starts with no complaints, no filed requests and no
        voting rights. An existing identity is overwritten without complaint
        and the bank counter is still incremented.
        """
        with self.store.atomic():
            require_admin(self.store, caller)

            now = datetime.now(timezone.utc)
            bank = Bank(
                id=identity,
                created_at=now,
                updated_at=now,
                identity=identity,
                name=name,
                reg_number=reg_number,
                complaints_reported=0,
                kyc_count=0,
                eligible_to_vote=False
            )
            self.store.put_bank(bank)
            count = self.store.increment_bank_count()

            if self.audit_trail:
                self.audit_trail.log_event(
                    event_type=AuditEventType.BANK_ADDED,
                    entity_type="bank",
                    entity_id=identity,
                    metadata={"name": name, "reg_number": reg_number, "number_of_banks": count},
                    user_id=caller
                )
            self.store.on_commit(self.events.emit, RegistryEventKind.BANK_ADDED, identity,
                                 caller=caller)

        log_action(logger, "info", f"Bank {name} added", caller=caller,
                   action="add_bank", resource=identity)
        return bank

    def set_voting_eligibility(self, caller: str, identity: str, eligible: bool) -> Bank:
        """Grant or revoke a bank's right to vote"""
        with self.store.atomic():
            require_admin(self.store, caller)
            bank = require_bank_present(self.store, identity)

            previous = bank.eligible_to_vote
            bank.eligible_to_vote = eligible
            self.store.put_bank(bank)

            if self.audit_trail:
                self.audit_trail.log_event(
                    event_type=AuditEventType.VOTING_ELIGIBILITY_CHANGED,
                    entity_type="bank",
                    entity_id=identity,
                    metadata={"old_value": previous, "new_value": eligible},
                    user_id=caller
                )
            self.store.on_commit(
                self.events.emit,
                RegistryEventKind.VOTING_ELIGIBILITY_CHANGED,
                f"{identity}:{str(eligible).lower()}",
                caller=caller
            )

        log_action(logger, "info", f"Voting eligibility set to {eligible}", caller=caller,
                   action="set_voting_eligibility", resource=identity)
        return bank

    def remove_bank(self, caller: str, identity: str) -> None:
        """
        Remove a bank

        The bank counter is left as is, and customers or requests owned by
        the bank stay in the registry until removed on their own.
        """
        with self.store.atomic():
            require_admin(self.store, caller)
            require_bank_present(self.store, identity)

            self.store.delete_bank(identity)

            if self.audit_trail:
                self.audit_trail.log_event(
                    event_type=AuditEventType.BANK_REMOVED,
                    entity_type="bank",
                    entity_id=identity,
                    metadata={"orphaned_customers": len(self.store.customers_owned_by(identity))},
                    user_id=caller
                )
            self.store.on_commit(self.events.emit, RegistryEventKind.BANK_REMOVED, identity,
                                 caller=caller)

        log_action(logger, "info", "Bank removed", caller=caller,
                   action="remove_bank", resource=identity)
