"""
Redirect Service

This service handles the read side of the binding lifecycle: it decides,
per read, whether a binding is active, expired or exhausted, and where
the reader should be sent.

States:
- Expired: expire_on is set and now is strictly after it
- Exhausted: max_requests > 0 and the counter (after this read) exceeds it
- Active: otherwise

Expiration is checked first. The counter comparison is strict, so the
read that brings the counter to max_requests still succeeds.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from shortlink.core.exceptions import URLExhaustedError, URLExpiredError
from shortlink.core.policy import BindingPolicy, utcnow
from shortlink.db.interface import BindingStore
from shortlink.db.models import Binding
from shortlink.services.binding_service import EventPublisher, publish
from shortlink.services.event_sink import LifecycleEvent, Opcode

logger = logging.getLogger(__name__)


def is_expired(binding: Binding, now: datetime) -> bool:
    return binding.expire_on is not None and now > binding.expire_on


def is_exhausted(binding: Binding) -> bool:
    return binding.max_requests > 0 and binding.counter > binding.max_requests


class RedirectService:
    """
    Service for resolving ids to redirect targets.

    Every resolve counts as an access (the store increments the counter),
    whatever state the binding turns out to be in.
    """

    def __init__(
        self,
        store: BindingStore,
        policy: BindingPolicy,
        events: Optional[EventPublisher] = None,
        clock: Callable[[], datetime] = utcnow
    ):
        """
        Initialize the redirect service.

        Args:
            store: Binding store
            policy: Global binding policy (default fallback URLs)
            events: Event sink for lifecycle events (optional)
            clock: Returns the current naive UTC time
        """
        self.store = store
        self.policy = policy
        self.events = events
        self.clock = clock

    async def resolve_redirect(self, identifier: str) -> str:
        """
        Get the redirect target for an id.

        Returns:
            The binding's target URL when the binding is active

        Raises:
            NotFoundError: If the id does not exist (no event is recorded)
            URLExpiredError: If the binding expired; ``redirect_url`` holds
                the expired fallback (may be empty)
            URLExhaustedError: If the binding is exhausted; ``redirect_url``
                holds the exhausted fallback (may be empty)
        """
        binding = await self.store.get(identifier)

        if is_expired(binding, self.clock()):
            logger.debug(
                f"Expire date for {binding.id}: expire_on {binding.expire_on}, "
                f"requests {binding.counter}"
            )
            error = URLExpiredError(
                binding.id,
                redirect_url=binding.expired_url or self.policy.expired_redirect_url
            )
            publish(self.events, LifecycleEvent(binding.id, Opcode.EXPIRED, error))
            raise error

        if is_exhausted(binding):
            logger.debug(
                f"Expire max request for {binding.id}: limit {binding.max_requests}, "
                f"requests {binding.counter}"
            )
            error = URLExhaustedError(
                binding.id,
                redirect_url=binding.exhausted_url or self.policy.exhausted_redirect_url
            )
            publish(self.events, LifecycleEvent(binding.id, Opcode.EXHAUSTED, error))
            raise error

        publish(self.events, LifecycleEvent(binding.id, Opcode.GET))
        return binding.url

    async def peek(self, identifier: str) -> Binding:
        """
        Get the stored binding for inspection.

        Does not count an access, classify the binding or record an event.
        """
        return await self.store.peek(identifier)
