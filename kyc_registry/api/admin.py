"""
Administrator endpoints: bank membership and voting eligibility
"""

from fastapi import APIRouter, Depends, status

from ..system import RegistrySystem
from ..guards import require_admin
from .deps import get_registry_system, get_caller
from .schemas import AddBankRequest, VotingEligibilityRequest, BankModel


router = APIRouter()


@router.post("/banks", status_code=status.HTTP_201_CREATED, response_model=BankModel)
async def add_bank(
    request: AddBankRequest,
    caller: str = Depends(get_caller),
    system: RegistrySystem = Depends(get_registry_system)
):
    """Onboard a bank"""
    bank = system.registrar.add_bank(caller, request.name, request.identity, request.reg_number)
    return BankModel.from_bank(bank)


@router.put("/banks/{identity}/eligibility", response_model=BankModel)
async def set_voting_eligibility(
    identity: str,
    request: VotingEligibilityRequest,
    caller: str = Depends(get_caller),
    system: RegistrySystem = Depends(get_registry_system)
):
    """Grant or revoke a bank's voting rights"""
    bank = system.registrar.set_voting_eligibility(caller, identity, request.eligible)
    return BankModel.from_bank(bank)


@router.delete("/banks/{identity}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_bank(
    identity: str,
    caller: str = Depends(get_caller),
    system: RegistrySystem = Depends(get_registry_system)
):
    """Remove a bank"""
    system.registrar.remove_bank(caller, identity)


@router.get("/audit/integrity")
async def verify_audit_integrity(
    caller: str = Depends(get_caller),
    system: RegistrySystem = Depends(get_registry_system)
):
    """Check the audit hash chain"""
    require_admin(system.store, caller)
    if system.audit_trail is None:
        return {"enabled": False}
    result = system.audit_trail.verify_integrity()
    return {"enabled": True, "valid": result["valid"], "total_events": result["total_events"]}
