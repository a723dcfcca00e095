"""Events, their URIs, relevance selectors and event storage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Hashable, Iterable, Iterator, List, Tuple


@dataclass(frozen=True)
class EventUris:
    """URIs attached to an event.

    ``source_uri`` registered the event, ``trigger_uris`` may trigger a
    report that uses it and ``querier_uris`` may receive such a report.
    Sequences are stored as tuples so that events stay hashable.
    """

    source_uri: Hashable
    trigger_uris: Tuple[Hashable, ...] = ()
    querier_uris: Tuple[Hashable, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "trigger_uris", tuple(self.trigger_uris))
        object.__setattr__(self, "querier_uris", tuple(self.querier_uris))

    @classmethod
    def mock(cls) -> "EventUris":
        """Sample URIs for tests and demos."""
        return cls(
            source_uri="blog.com",
            trigger_uris=("shoes.com",),
            querier_uris=("shoes.com", "adtech.com"),
        )


class Event(ABC):
    """An event that belongs to an epoch."""

    @property
    @abstractmethod
    def epoch_id(self) -> Hashable:
        """Identifier of the epoch the event belongs to."""

    @property
    @abstractmethod
    def event_uris(self) -> EventUris:
        """URIs attached to the event."""


@dataclass(frozen=True)
class SimpleEvent(Event):
    """A barebones event, mostly for tests and demos."""

    id: int
    epoch_number: int
    event_key: int
    uris: EventUris

    @property
    def epoch_id(self) -> int:
        return self.epoch_number

    @property
    def event_uris(self) -> EventUris:
        return self.uris


@dataclass(frozen=True)
class PpaEvent(Event):
    """Impression event.

    ``timestamp`` orders events for last-touch attribution and
    ``filter_data`` carries bit-packed attributes that relevance selectors
    can match on.
    """

    id: int
    timestamp: int
    epoch_number: int
    histogram_index: int
    uris: EventUris
    filter_data: int

    @property
    def epoch_id(self) -> int:
        return self.epoch_number

    @property
    def event_uris(self) -> EventUris:
        return self.uris


class RelevantEventSelector(ABC):
    """Decides, event by event, which events matter for a request."""

    @abstractmethod
    def is_relevant_event(self, event: Event) -> bool:
        """Return True if ``event`` is relevant."""


class EventStorage(ABC):
    """Stores events and retrieves them by epoch."""

    @abstractmethod
    def add_event(self, event: Event) -> None:
        """Store a new event."""

    @abstractmethod
    def events_for_epoch(self, epoch_id: Hashable) -> Iterator[Event]:
        """Iterate over all events stored for ``epoch_id``."""


class HashMapEventStorage(EventStorage):
    """In-memory event storage mapping each epoch to its events."""

    def __init__(self, events: Iterable[Event] = ()) -> None:
        self.epochs: Dict[Hashable, List[Event]] = defaultdict(list)
        for event in events:
            self.add_event(event)

    def add_event(self, event: Event) -> None:
        self.epochs[event.epoch_id].append(event)

    def events_for_epoch(self, epoch_id: Hashable) -> Iterator[Event]:
        return iter(list(self.epochs.get(epoch_id, ())))