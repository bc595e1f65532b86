"""
Registry error taxonomy

Every failed precondition surfaces as one of these. They are raised before
any mutation, so an operation that raises leaves the registry unchanged.
"""


class KYCRegistryError(Exception):
    """Base class for registry errors"""
    code = "registry_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthorized(KYCRegistryError):
    """Caller lacks the required role (administrator or member bank)"""
    code = "unauthorized"


class Ineligible(KYCRegistryError):
    """Bank is not currently permitted to vote"""
    code = "ineligible"


class NotFound(KYCRegistryError):
    """Referenced customer, bank or request is absent"""
    code = "not_found"


class AlreadyExists(KYCRegistryError):
    """Duplicate creation attempted"""
    code = "already_exists"


class DuplicateRequest(KYCRegistryError):
    """A pending KYC request collides with the one being filed"""
    code = "duplicate_request"
