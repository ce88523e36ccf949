"""Sequence-numbered request tickets.

Responses can arrive out of order. Each consumer takes a ticket before
issuing a request and applies the response only if that ticket is still
the latest one issued; otherwise the response is discarded.
"""

import itertools
from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class RequestTicket:
    consumer: str
    sequence: int


class LatestRequestGate:
    """Issues tickets per consumer and tells whether a ticket is still current."""

    def __init__(self):
        self._counter = itertools.count(1)
        self._latest: Dict[str, int] = {}

    def issue(self, consumer: str) -> RequestTicket:
        ticket = RequestTicket(consumer, next(self._counter))
        self._latest[consumer] = ticket.sequence
        return ticket

    def is_current(self, ticket: RequestTicket) -> bool:
        return self._latest.get(ticket.consumer) == ticket.sequence

    def latest(self, consumer: str) -> Optional[int]:
        return self._latest.get(consumer)

    def cancel(self, *consumers: str) -> None:
        """Make every outstanding ticket of these consumers stale."""
        for consumer in consumers:
            if consumer in self._latest:
                self._latest[consumer] = next(self._counter)
