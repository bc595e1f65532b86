"""
Registry system wiring

Builds storage, the registry store, the audit trail, the event dispatcher
and the two operation sets from configuration.
"""

from typing import Optional

from .config import KYCRegistryConfig, get_config
from .storage import StorageInterface, create_storage
from .registry import RegistryStore
from .audit import AuditTrail
from .events import EventDispatcher
from .registrar import Registrar
from .verification import VerificationEngine


class RegistrySystem:
    """KYC registry with all components initialized"""

    def __init__(
        self,
        config: Optional[KYCRegistryConfig] = None,
        storage: Optional[StorageInterface] = None,
        events: Optional[EventDispatcher] = None
    ):
        self.config = config or get_config()
        self.storage = storage or create_storage(self.config.database_url)
        self.store = RegistryStore(self.storage, self.config.admin_identity)
        self.events = events or EventDispatcher()
        self.audit_trail = AuditTrail(self.storage) if self.config.enable_audit_logging else None
        self.registrar = Registrar(self.store, self.events, self.audit_trail)
        self.engine = VerificationEngine(self.store, self.events, self.audit_trail)

    @property
    def admin_identity(self) -> str:
        return self.store.admin_identity

    def close(self) -> None:
        self.storage.close()
