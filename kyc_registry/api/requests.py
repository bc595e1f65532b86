"""
KYC request endpoints
"""

from fastapi import APIRouter, Depends, status

from ..system import RegistrySystem
from .deps import get_registry_system, get_caller
from .schemas import FileRequestRequest, KycRequestModel


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED, response_model=KycRequestModel)
async def file_request(
    request: FileRequestRequest,
    caller: str = Depends(get_caller),
    system: RegistrySystem = Depends(get_registry_system)
):
    """File a KYC request for a customer"""
    kyc_request = system.engine.file_request(caller, request.user_name, request.data)
    return KycRequestModel.from_request(kyc_request)


@router.get("/{user_name}", response_model=KycRequestModel)
async def get_request(
    user_name: str,
    caller: str = Depends(get_caller),
    system: RegistrySystem = Depends(get_registry_system)
):
    return KycRequestModel.from_request(system.engine.get_request_details(caller, user_name))
