"""
Access Control Guard

Precondition checks run at the top of every registry operation. Each guard
reads the store, never writes it, and raises on failure. Customer operations
compose them in a fixed order: member bank, then voting eligibility, then
customer presence.
"""

from .errors import Unauthorized, Ineligible, NotFound
from .registry import RegistryStore, Bank, Customer


def require_admin(store: RegistryStore, caller: str) -> None:
    if not store.is_admin(caller):
        raise Unauthorized(f"{caller} is not the registry administrator")


def require_bank(store: RegistryStore, caller: str) -> Bank:
    bank = store.get_bank(caller)
    if bank is None:
        raise Unauthorized(f"{caller} is not a member bank")
    return bank


def require_voting_eligible(store: RegistryStore, caller: str) -> Bank:
    bank = store.get_bank(caller)
    if bank is None or not bank.eligible_to_vote:
        raise Ineligible(f"Bank {caller} is not eligible to vote")
    return bank


def require_customer_present(store: RegistryStore, user_name: str) -> Customer:
    customer = store.get_customer(user_name)
    if customer is None:
        raise NotFound(f"Customer {user_name} not found")
    return customer


def require_bank_present(store: RegistryStore, identity: str) -> Bank:
    bank = store.get_bank(identity)
    if bank is None:
        raise NotFound(f"Bank {identity} not found")
    return bank


def require_eligible_bank(store: RegistryStore, caller: str) -> Bank:
    """Member bank check followed by the voting eligibility check"""
    require_bank(store, caller)
    return require_voting_eligible(store, caller)
