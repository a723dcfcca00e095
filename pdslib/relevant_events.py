"""Relevant events grouped per epoch."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterable, List, Set, Tuple

from pdslib.events import Event, EventStorage, RelevantEventSelector


@dataclass
class RelevantEvents:
    """Relevant events for a set of epochs."""

    events_per_epoch: Dict[Hashable, List[Event]] = field(default_factory=dict)

    @classmethod
    def from_event_storage(
        cls,
        event_storage: EventStorage,
        epoch_ids: Iterable[Hashable],
        selector: RelevantEventSelector,
    ) -> "RelevantEvents":
        """Fetch the events of each epoch and keep the relevant ones."""
        events_per_epoch = {
            epoch_id: [
                event
                for event in event_storage.events_for_epoch(epoch_id)
                if selector.is_relevant_event(event)
            ]
            for epoch_id in epoch_ids
        }
        return cls.from_mapping(events_per_epoch)

    @classmethod
    def from_mapping(
        cls, events_per_epoch: Dict[Hashable, Iterable[Event]]
    ) -> "RelevantEvents":
        """Build from a mapping of epoch to its relevant events."""
        return cls({epoch: list(events) for epoch, events in events_per_epoch.items()})

    @classmethod
    def from_events(cls, events: Iterable[Event]) -> "RelevantEvents":
        """Group a flat collection of events by their epoch."""
        grouped: Dict[Hashable, List[Event]] = defaultdict(list)
        for event in events:
            grouped[event.epoch_id].append(event)
        return cls(dict(grouped))

    def for_epoch(self, epoch_id: Hashable) -> Tuple[Event, ...]:
        """Relevant events of one epoch, empty if there are none."""
        return tuple(self.events_per_epoch.get(epoch_id, ()))

    def sources_for_epoch(self, epoch_id: Hashable) -> Set[Hashable]:
        """Source URIs with at least one relevant event in the epoch."""
        return {event.event_uris.source_uri for event in self.for_epoch(epoch_id)}

    def drop_epoch(self, epoch_id: Hashable) -> None:
        """Forget an epoch and all of its events."""
        self.events_per_epoch.pop(epoch_id, None)

    def __copy__(self) -> "RelevantEvents":
        return type(self).from_mapping(self.events_per_epoch)