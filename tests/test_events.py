"""
Tests for the event dispatcher used as the registry event sink
"""

from datetime import datetime

from kyc_registry.events import (
    EventDispatcher, EventRecorder, RegistryEvent, RegistryEventKind
)


class TestRegistryEvent:

    def test_bank_reported_shape(self):
        event = RegistryEvent(kind=RegistryEventKind.BANK_REPORTED, payload="Bank B", caller="0x1")
        data = event.to_dict()

        assert data["kind"] == "BankReported"
        assert data["payload"] == "Bank B"
        assert data["caller"] == "0x1"
        assert isinstance(event.timestamp, datetime)

    def test_from_dict(self):
        event = RegistryEvent(kind=RegistryEventKind.CUSTOMER_REGISTERED, payload="alice")
        restored = RegistryEvent.from_dict(event.to_dict())
        assert restored == event


class TestEventDispatcher:

    def test_subscribe_by_kind(self):
        dispatcher = EventDispatcher()
        received = []
        dispatcher.subscribe(RegistryEventKind.BANK_REPORTED, received.append)

        dispatcher.emit(RegistryEventKind.BANK_REPORTED, "Bank B")
        dispatcher.emit(RegistryEventKind.BANK_ADDED, "0x1")

        assert [e.payload for e in received] == ["Bank B"]

    def test_subscribe_all(self):
        dispatcher = EventDispatcher()
        recorder = EventRecorder()
        dispatcher.subscribe_all(recorder)

        dispatcher.emit(RegistryEventKind.BANK_ADDED, "0x1")
        dispatcher.emit(RegistryEventKind.BANK_REMOVED, "0x1")

        assert [e.kind for e in recorder.events] == [
            RegistryEventKind.BANK_ADDED, RegistryEventKind.BANK_REMOVED
        ]
        assert len(recorder.of_kind(RegistryEventKind.BANK_REMOVED)) == 1

    def test_failing_handler_does_not_break_publish(self):
        dispatcher = EventDispatcher()
        recorder = EventRecorder()

        def broken(event):
            raise RuntimeError("sink down")

        dispatcher.subscribe(RegistryEventKind.BANK_REPORTED, broken)
        dispatcher.subscribe(RegistryEventKind.BANK_REPORTED, recorder)

        dispatcher.emit(RegistryEventKind.BANK_REPORTED, "Bank B")
        assert len(recorder.events) == 1

    def test_unsubscribe_and_counts(self):
        dispatcher = EventDispatcher()
        recorder = EventRecorder()
        dispatcher.subscribe(RegistryEventKind.BANK_ADDED, recorder)
        dispatcher.subscribe_all(recorder)
        assert dispatcher.get_handler_count() == 2
        assert dispatcher.get_handler_count(RegistryEventKind.BANK_ADDED) == 1

        dispatcher.unsubscribe(RegistryEventKind.BANK_ADDED, recorder)
        dispatcher.unsubscribe(RegistryEventKind.BANK_ADDED, recorder)  # logged, not raised
        assert dispatcher.get_handler_count(RegistryEventKind.BANK_ADDED) == 0

        dispatcher.clear()
        assert dispatcher.get_handler_count() == 0
