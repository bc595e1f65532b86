"""
Audit Trail Module

Hash-chained immutable audit log with SHA-256 for tamper detection.
Every registry state change is recorded here.
"""

import hashlib
import json
import threading
from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Dict, List, Optional, Any, Tuple
from enum import Enum
import uuid

from .storage import StorageInterface, StorageRecord


class AuditEventType(Enum):
    """Types of audit events"""
    # Bank events
    BANK_ADDED = "bank_added"
    BANK_REMOVED = "bank_removed"
    VOTING_ELIGIBILITY_CHANGED = "voting_eligibility_changed"
    BANK_REPORTED = "bank_reported"
    BANK_SUSPENDED = "bank_suspended"

    # Request events
    KYC_REQUEST_FILED = "kyc_request_filed"
    KYC_REQUEST_DISCARDED = "kyc_request_discarded"

    # Customer events
    CUSTOMER_REGISTERED = "customer_registered"
    CUSTOMER_AMENDED = "customer_amended"
    CUSTOMER_REMOVED = "customer_removed"
    CUSTOMER_UPVOTED = "customer_upvoted"
    CUSTOMER_DOWNVOTED = "customer_downvoted"
    KYC_STATUS_CHANGED = "kyc_status_changed"


@dataclass
class AuditEvent(StorageRecord):
    """
    Immutable audit event with hash chaining for tamper detection
    """
    event_type: AuditEventType
    entity_type: str  # bank, customer or kyc_request
    entity_id: str
    previous_hash: str
    current_hash: str
    metadata: Dict[str, Any]
    user_id: Optional[str] = None  # Caller identity

    def __post_init__(self):
        if self.metadata:
            self.metadata = {k: (v.value if isinstance(v, Enum) else v) for k, v in self.metadata.items()}

    def calculate_hash(self) -> str:
        """
        Calculate SHA-256 hash of this event
        Hash includes all fields except current_hash
        """
        hash_data = {
            'id': self.id,
            'created_at': self.created_at.isoformat(),
            'event_type': self.event_type.value,
            'entity_type': self.entity_type,
            'entity_id': self.entity_id,
            'previous_hash': self.previous_hash,
            'user_id': self.user_id,
            'metadata': self.metadata
        }

        json_data = json.dumps(hash_data, sort_keys=True, separators=(',', ':'))
        return hashlib.sha256(json_data.encode('utf-8')).hexdigest()

    def verify_hash(self) -> bool:
        return self.current_hash == self.calculate_hash()

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result['event_type'] = self.event_type.value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AuditEvent':
        data = dict(data)
        if isinstance(data['created_at'], str):
            data['created_at'] = datetime.fromisoformat(data['created_at'])
        if isinstance(data['updated_at'], str):
            data['updated_at'] = datetime.fromisoformat(data['updated_at'])
        if isinstance(data['event_type'], str):
            data['event_type'] = AuditEventType(data['event_type'])
        return cls(**data)


class AuditTrail:
    """
    Hash-chained audit trail for tamper detection

    Events are ordered by a sequence number kept alongside each record, so
    ordering survives identical timestamps. The chain head (last hash and
    sequence) is stored in a meta table in the same storage, so it is read
    in constant time and rolls back together with the events it describes.
    """

    HEAD_KEY = "chain_head"

    def __init__(self, storage: StorageInterface, table_name: str = "audit_events"):
        self.storage = storage
        self.table_name = table_name
        self.meta_table = f"{table_name}_meta"
        self._lock = threading.Lock()
        if self.storage.load(self.meta_table, self.HEAD_KEY) is None and self.storage.count(self.table_name):
            self._rebuild_head()

    def _sorted_records(self) -> List[Dict[str, Any]]:
        records = self.storage.load_all(self.table_name)
        return sorted(records, key=lambda r: r.get('metadata', {}).get('sequence', 0))

    def _rebuild_head(self) -> None:
        """Derive the head from stored events, for tables written without one"""
        records = self._sorted_records()
        last = records[-1]
        self._save_head(last.get('current_hash', ""),
                        last.get('metadata', {}).get('sequence', len(records)))

    def _load_head(self) -> Tuple[str, int]:
        head = self.storage.load(self.meta_table, self.HEAD_KEY)
        if head is None:
            return "", 0
        return head['hash'], head['sequence']

    def _save_head(self, last_hash: str, sequence: int) -> None:
        self.storage.save(self.meta_table, self.HEAD_KEY, {'hash': last_hash, 'sequence': sequence})

    def log_event(
        self,
        event_type: AuditEventType,
        entity_type: str,
        entity_id: str,
        metadata: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None
    ) -> AuditEvent:
        """
        Log an audit event with hash chaining

        Args:
            event_type: Type of audit event
            entity_type: Type of entity being audited
            entity_id: ID of the entity
            metadata: Additional event-specific data
            user_id: Identity of the caller that initiated the action

        Returns:
            Created AuditEvent
        """
        with self._lock, self.storage.atomic():
            now = datetime.now(timezone.utc)

            previous_hash, sequence = self._load_head()
            sequence += 1
            event_metadata = dict(metadata or {})
            event_metadata['sequence'] = sequence

            event = AuditEvent(
                id=str(uuid.uuid4()),
                created_at=now,
                updated_at=now,
                event_type=event_type,
                entity_type=entity_type,
                entity_id=entity_id,
                previous_hash=previous_hash,
                current_hash="",
                user_id=user_id,
                metadata=event_metadata
            )
            event.current_hash = event.calculate_hash()

            self.storage.save(self.table_name, event.id, event.to_dict())
            self._save_head(event.current_hash, sequence)

            return event

    def get_events_for_entity(self, entity_type: str, entity_id: str) -> List[AuditEvent]:
        """Get all audit events for a specific entity, oldest first"""
        return [
            e for e in self.get_all_events()
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    def get_events_by_type(self, event_type: AuditEventType) -> List[AuditEvent]:
        return [e for e in self.get_all_events() if e.event_type == event_type]

    def get_all_events(self) -> List[AuditEvent]:
        return [AuditEvent.from_dict(data) for data in self._sorted_records()]

    def verify_integrity(self) -> Dict[str, Any]:
        """
        Verify the integrity of the entire audit chain

        Returns:
            Dictionary with integrity check results
        """
        result = {
            'valid': True,
            'total_events': 0,
            'hash_errors': [],
            'chain_breaks': []
        }

        events = self.get_all_events()
        result['total_events'] = len(events)

        previous_hash = ""
        for i, event in enumerate(events):
            if not event.verify_hash():
                result['valid'] = False
                result['hash_errors'].append({
                    'event_id': event.id,
                    'position': i,
                    'expected_hash': event.calculate_hash(),
                    'actual_hash': event.current_hash
                })
            if event.previous_hash != previous_hash:
                result['valid'] = False
                result['chain_breaks'].append({
                    'event_id': event.id,
                    'position': i,
                    'expected_previous_hash': previous_hash,
                    'actual_previous_hash': event.previous_hash
                })
            previous_hash = event.current_hash

        return result

    def count_events(self) -> int:
        return self.storage.count(self.table_name)

    def get_latest_hash(self) -> Optional[str]:
        last_hash, _ = self._load_head()
        return last_hash or None
