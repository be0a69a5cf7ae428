"""
Shared fixtures: an in-memory binding store, recording event sinks and
service instances wired to them.
"""

from datetime import datetime
from typing import Dict, List

import pytest

from shortlink.core.exceptions import DuplicateIDError, NotFoundError
from shortlink.core.policy import BindingPolicy
from shortlink.db.interface import BindingStore
from shortlink.db.models import Binding
from shortlink.services.binding_service import BindingService
from shortlink.services.event_sink import LifecycleEvent
from shortlink.services.redirect_service import RedirectService

NOW = datetime(2026, 10, 19, 12, 0, 0)


class InMemoryBindingStore(BindingStore):
    """Dict-backed store honoring the BindingStore guarantees."""

    def __init__(self):
        self.bindings: Dict[str, Binding] = {}
        self.calls: List[tuple] = []

    @staticmethod
    def _copy(binding: Binding) -> Binding:
        return Binding(**binding.model_dump())

    async def insert(self, binding: Binding) -> Binding:
        self.calls.append(("insert", binding.id))
        if binding.id in self.bindings:
            raise DuplicateIDError(binding.id)
        self.bindings[binding.id] = self._copy(binding)
        return binding

    async def upsert(self, binding: Binding) -> Binding:
        self.calls.append(("upsert", binding.id))
        stored = self._copy(binding)
        existing = self.bindings.get(binding.id)
        if existing is not None:
            stored.bound_at = existing.bound_at
            stored.counter = existing.counter
        self.bindings[binding.id] = stored
        return self._copy(stored)

    async def get(self, identifier: str) -> Binding:
        self.calls.append(("get", identifier))
        if identifier not in self.bindings:
            raise NotFoundError(identifier)
        self.bindings[identifier].counter += 1
        return self._copy(self.bindings[identifier])

    async def peek(self, identifier: str) -> Binding:
        self.calls.append(("peek", identifier))
        if identifier not in self.bindings:
            raise NotFoundError(identifier)
        return self._copy(self.bindings[identifier])

    async def delete(self, identifier: str) -> None:
        self.calls.append(("delete", identifier))
        if identifier not in self.bindings:
            raise NotFoundError(identifier)
        del self.bindings[identifier]


class RecordingSink:
    """Event sink that keeps every event in a list."""

    def __init__(self):
        self.events: List[LifecycleEvent] = []

    def push_event(self, event: LifecycleEvent) -> None:
        self.events.append(event)


class FailingSink:
    """Event sink whose push always fails."""

    def push_event(self, event: LifecycleEvent) -> None:
        raise RuntimeError("sink unavailable")


class SequenceGenerator:
    """Id generator returning predefined ids in order."""

    def __init__(self, *ids: str):
        self.ids = list(ids)
        self.calls: List[tuple] = []

    def __call__(self, alphabet: str, length: int) -> str:
        self.calls.append((alphabet, length))
        return self.ids.pop(0)


@pytest.fixture
def store() -> InMemoryBindingStore:
    return InMemoryBindingStore()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def policy() -> BindingPolicy:
    return BindingPolicy(
        alphabet="abcdefghijklmnopqrstuvwxyz0123456789",
        length=6,
        expired_redirect_url="https://example.com/expired",
        exhausted_redirect_url="https://example.com/exhausted",
    )


@pytest.fixture
def generator() -> SequenceGenerator:
    return SequenceGenerator("gen001", "gen002", "gen003")


@pytest.fixture
def binding_service(store, policy, sink, generator) -> BindingService:
    return BindingService(store, policy, events=sink, id_generator=generator, clock=lambda: NOW)


@pytest.fixture
def redirect_service(store, policy, sink) -> RedirectService:
    return RedirectService(store, policy, events=sink, clock=lambda: NOW)
