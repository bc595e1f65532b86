"""
Event System Module

Publish/subscribe dispatcher used as the registry's event sink. Events are
of the form ``{kind, payload}``; deployments subscribe handlers to forward
them wherever they keep their event log.
"""

from enum import Enum
from typing import Callable, Dict, List, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime, timezone
import uuid
import logging
from threading import RLock


class RegistryEventKind(Enum):
    """Kinds of events emitted by the registry"""

    # Bank events
    BANK_ADDED = "BankAdded"
    BANK_REMOVED = "BankRemoved"
    BANK_REPORTED = "BankReported"
    BANK_SUSPENDED = "BankSuspended"
    VOTING_ELIGIBILITY_CHANGED = "VotingEligibilityChanged"

    # Request events
    KYC_REQUEST_FILED = "KycRequestFiled"

    # Customer events
    CUSTOMER_REGISTERED = "CustomerRegistered"
    CUSTOMER_AMENDED = "CustomerAmended"
    CUSTOMER_REMOVED = "CustomerRemoved"
    CUSTOMER_VOTED = "CustomerVoted"


@dataclass
class RegistryEvent:
    """An emitted event. ``payload`` is a plain string."""
    kind: RegistryEventKind
    payload: str
    caller: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind.value,
            'payload': self.payload,
            'caller': self.caller,
            'timestamp': self.timestamp.isoformat(),
            'event_id': self.event_id
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RegistryEvent':
        return cls(
            kind=RegistryEventKind(data['kind']),
            payload=data['payload'],
            caller=data.get('caller'),
            timestamp=datetime.fromisoformat(data['timestamp']) if isinstance(data['timestamp'], str) else data['timestamp'],
            event_id=data['event_id']
        )


EventHandler = Callable[[RegistryEvent], None]


class EventDispatcher:
    """Central event dispatcher, publish/subscribe pattern"""

    def __init__(self):
        self._handlers: Dict[RegistryEventKind, List[EventHandler]] = {}
        self._global_handlers: List[EventHandler] = []
        self._lock = RLock()
        self.logger = logging.getLogger("kyc_registry.events")

    def subscribe(self, kind: RegistryEventKind, handler: EventHandler) -> None:
        with self._lock:
            self._handlers.setdefault(kind, []).append(handler)
            self.logger.debug(f"Subscribed handler {getattr(handler, '__name__', repr(handler))} to {kind.value}")

    def subscribe_all(self, handler: EventHandler) -> None:
        """Subscribe to every event kind"""
        with self._lock:
            self._global_handlers.append(handler)

    def unsubscribe(self, kind: RegistryEventKind, handler: EventHandler) -> None:
        with self._lock:
            try:
                self._handlers.get(kind, []).remove(handler)
            except ValueError:
                self.logger.warning(f"Handler {getattr(handler, '__name__', repr(handler))} was not subscribed to {kind.value}")

    def publish(self, event: RegistryEvent) -> None:
        """Deliver an event to its subscribers. A failing handler never breaks the caller."""
        with self._lock:
            handlers = list(self._handlers.get(event.kind, [])) + list(self._global_handlers)

        self.logger.debug(f"Publishing {event.kind.value}: {event.payload}")
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                self.logger.error(f"Error in event handler {getattr(handler, '__name__', repr(handler))} for {event.kind.value}: {e}")

    def emit(self, kind: RegistryEventKind, payload: str, caller: Optional[str] = None) -> RegistryEvent:
        """Build and publish an event"""
        event = RegistryEvent(kind=kind, payload=payload, caller=caller)
        self.publish(event)
        return event

    def clear(self) -> None:
        with self._lock:
            self._handlers.clear()
            self._global_handlers.clear()

    def get_handler_count(self, kind: Optional[RegistryEventKind] = None) -> int:
        with self._lock:
            if kind:
                return len(self._handlers.get(kind, []))
            total = sum(len(handlers) for handlers in self._handlers.values())
            return total + len(self._global_handlers)


class EventRecorder:
    """Handler that keeps every event it receives, in order"""

    def __init__(self):
        self.events: List[RegistryEvent] = []

    def __call__(self, event: RegistryEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: RegistryEventKind) -> List[RegistryEvent]:
        return [e for e in self.events if e.kind == kind]
