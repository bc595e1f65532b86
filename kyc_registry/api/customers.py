"""
Customer endpoints: registration, amendment, removal and voting
"""

from fastapi import APIRouter, Depends, status

from ..system import RegistrySystem
from .deps import get_registry_system, get_caller
from .schemas import RegisterCustomerRequest, AmendCustomerRequest, CustomerModel


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED, response_model=CustomerModel)
async def register_customer(
    request: RegisterCustomerRequest,
    caller: str = Depends(get_caller),
    system: RegistrySystem = Depends(get_registry_system)
):
    customer = system.engine.register_customer(caller, request.user_name, request.data)
    return CustomerModel.from_customer(customer)


@router.get("/{user_name}", response_model=CustomerModel)
async def get_customer(
    user_name: str,
    caller: str = Depends(get_caller),
    system: RegistrySystem = Depends(get_registry_system)
):
    customer = system.engine.get_customer_details(caller, user_name)
    return CustomerModel.from_customer(customer)


@router.get("/{user_name}/status")
async def get_customer_status(
    user_name: str,
    caller: str = Depends(get_caller),
    system: RegistrySystem = Depends(get_registry_system)
):
    return {"user_name": user_name, "verified": system.engine.get_customer_status(caller, user_name)}


@router.put("/{user_name}", response_model=CustomerModel)
async def amend_customer(
    user_name: str,
    request: AmendCustomerRequest,
    caller: str = Depends(get_caller),
    system: RegistrySystem = Depends(get_registry_system)
):
    """Replace customer data; resets votes and discards any pending request"""
    customer = system.engine.amend_customer(caller, user_name, request.data)
    return CustomerModel.from_customer(customer)


@router.delete("/{user_name}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_customer(
    user_name: str,
    caller: str = Depends(get_caller),
    system: RegistrySystem = Depends(get_registry_system)
):
    system.engine.remove_customer(caller, user_name)


@router.post("/{user_name}/upvote", response_model=CustomerModel)
async def upvote_customer(
    user_name: str,
    caller: str = Depends(get_caller),
    system: RegistrySystem = Depends(get_registry_system)
):
    return CustomerModel.from_customer(system.engine.upvote(caller, user_name))


@router.post("/{user_name}/downvote", response_model=CustomerModel)
async def downvote_customer(
    user_name: str,
    caller: str = Depends(get_caller),
    system: RegistrySystem = Depends(get_registry_system)
):
    return CustomerModel.from_customer(system.engine.downvote(caller, user_name))
