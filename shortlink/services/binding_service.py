"""
Binding Service

This service handles the write side of the binding lifecycle:
- Validating bind requests (target/fallback URLs, custom ids)
- Resolving the effective expiration and max-access policy
- Assigning a generated id or reusing the caller's id
- Persisting through the binding store and recording lifecycle events
- Deleting bindings

Design Decisions:
- Generated ids are inserted (a collision is an error), custom ids are
  upserted (binding an existing id updates it in place)
- Validation happens before any storage call
- Store errors propagate unchanged, no event is recorded for them
- Events are fire-and-forget: a failing sink never changes the result
"""

import logging
from datetime import datetime
from typing import Callable, Optional, Protocol

from shortlink.core.exceptions import InvalidURLError
from shortlink.core.policy import (
    BindingPolicy,
    as_utc,
    resolve_expiration,
    resolve_max_access,
    utcnow,
)
from shortlink.core.validators import is_valid_url, validate_identifier
from shortlink.db.interface import BindingStore
from shortlink.db.models import Binding, BindRequest
from shortlink.services.event_sink import LifecycleEvent, Opcode
from shortlink.services.id_generator import generate_identifier

logger = logging.getLogger(__name__)


class EventPublisher(Protocol):
    def push_event(self, event: LifecycleEvent) -> None: ...


def publish(events: Optional[EventPublisher], event: LifecycleEvent) -> None:
    """Hand an event to the sink. Sink failures are logged, never raised."""
    if events is None:
        return
    try:
        events.push_event(event)
    except Exception as e:
        logger.warning(f"Failed to record {event.opcode.value} event for {event.identifier}: {e}")


class BindingService:
    """
    Core business logic for creating, updating and deleting bindings.

    Separated from API layer for testability: the store, the event sink,
    the id generator and the global policy are all injected.
    """

    def __init__(
        self,
        store: BindingStore,
        policy: BindingPolicy,
        events: Optional[EventPublisher] = None,
        id_generator: Callable[[str, int], str] = generate_identifier,
        clock: Callable[[], datetime] = utcnow
    ):
        """
        Initialize the binding service.

        Args:
            store: Binding store
            policy: Global binding policy (id shape, default limits)
            events: Event sink for lifecycle events (optional)
            id_generator: Generates ids from (alphabet, length)
            clock: Returns the current naive UTC time
        """
        self.store = store
        self.policy = policy
        self.events = events
        self.id_generator = id_generator
        self.clock = clock

    async def bind(
        self,
        request: BindRequest,
        enforce_alphabet: bool = True,
        enforce_length: bool = True,
        bound_at: Optional[datetime] = None
    ) -> str:
        """
        Create or update a binding.

        Args:
            request: The bind request
            enforce_alphabet: Reject custom ids with characters outside the alphabet
            enforce_length: Reject custom ids whose length differs from the policy
            bound_at: Binding timestamp (default: now)

        Returns:
            The id of the binding

        Raises:
            InvalidURLError: If the target or a fallback URL is invalid
            InvalidAlphabetError, InvalidLengthError: If the custom id is rejected
            InvalidPolicyError: If the effective expiration is out of range
            DuplicateIDError: If a generated id collides with an existing one
        """
        self._check_url(request.url)
        if request.expired_url:
            self._check_url(request.expired_url)
        if request.exhausted_url:
            self._check_url(request.exhausted_url)

        bound_at = as_utc(bound_at) if bound_at is not None else self.clock()

        # the local policy always takes priority
        expire_on = resolve_expiration(
            bound_at,
            request.ttl,
            request.expire_on,
            self.policy.ttl,
            self.policy.expire_on
        )
        max_requests = resolve_max_access(request.max_requests, self.policy.max_requests)

        identifier = (request.id or "").strip()
        if not identifier:
            identifier = self.id_generator(self.policy.alphabet, self.policy.length)
            binding = self._build(identifier, request, bound_at, expire_on, max_requests)
            await self.store.insert(binding)
        else:
            validate_identifier(
                identifier,
                self.policy.alphabet,
                self.policy.length,
                enforce_alphabet,
                enforce_length
            )
            binding = self._build(identifier, request, bound_at, expire_on, max_requests)
            await self.store.upsert(binding)

        logger.debug(
            f"Bound {identifier} -> {request.url} "
            f"(expire_on={expire_on}, max_requests={max_requests})"
        )
        publish(self.events, LifecycleEvent(identifier=identifier, opcode=Opcode.INSERT))
        return identifier

    async def peek(self, identifier: str) -> Binding:
        """Return the stored binding without counting an access."""
        return await self.store.peek(identifier)

    async def unbind(self, identifier: str) -> None:
        """
        Delete a binding.

        Raises:
            NotFoundError: If the id does not exist (no event is recorded)
        """
        await self.store.delete(identifier)
        logger.debug(f"Unbound {identifier}")
        publish(self.events, LifecycleEvent(identifier=identifier, opcode=Opcode.DELETE))

    @staticmethod
    def _check_url(url: str) -> None:
        if not is_valid_url(url):
            logger.info(f"Rejected invalid URL: {url!r}")
            raise InvalidURLError(url, reason="URL must be a valid absolute URI")

    @staticmethod
    def _build(
        identifier: str,
        request: BindRequest,
        bound_at: datetime,
        expire_on: Optional[datetime],
        max_requests: int
    ) -> Binding:
        return Binding(
            id=identifier,
            url=request.url,
            bound_at=bound_at,
            ttl=request.ttl or 0,
            expire_on=expire_on,
            max_requests=max_requests,
            counter=0,
            expired_url=request.expired_url,
            exhausted_url=request.exhausted_url,
        )
