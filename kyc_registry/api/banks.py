"""
Bank endpoints for member banks: details, complaint counts and reports
"""

from fastapi import APIRouter, Depends

from ..system import RegistrySystem
from .deps import get_registry_system, get_caller
from .schemas import BankModel, ReportBankRequest


router = APIRouter()


@router.get("/{identity}", response_model=BankModel)
async def get_bank(
    identity: str,
    caller: str = Depends(get_caller),
    system: RegistrySystem = Depends(get_registry_system)
):
    return BankModel.from_bank(system.engine.get_bank_details(caller, identity))


@router.get("/{identity}/complaints")
async def get_bank_complaint_count(
    identity: str,
    caller: str = Depends(get_caller),
    system: RegistrySystem = Depends(get_registry_system)
):
    count = system.engine.get_bank_complaint_count(caller, identity)
    return {"identity": identity, "complaints_reported": count}


@router.post("/{identity}/reports", response_model=BankModel)
async def report_bank(
    identity: str,
    request: ReportBankRequest,
    caller: str = Depends(get_caller),
    system: RegistrySystem = Depends(get_registry_system)
):
    """Report a bank; may suspend its voting rights"""
    bank = system.engine.report_bank(caller, identity, request.reported_name)
    return BankModel.from_bank(bank)
