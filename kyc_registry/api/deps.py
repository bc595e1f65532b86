"""
Request dependencies: the registry system and the caller identity
"""

from fastapi import HTTPException, Request, status

from ..system import RegistrySystem


def get_registry_system(request: Request) -> RegistrySystem:
    return request.app.state.system


def get_caller(request: Request) -> str:
    """
    Caller identity as set by the authenticating front proxy

    The registry trusts this value; it performs no authentication itself.
    """
    system: RegistrySystem = request.app.state.system
    caller = request.headers.get(system.config.caller_header)
    if not caller:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {system.config.caller_header} header"
        )
    return caller
