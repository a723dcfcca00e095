import copy

from pdslib.events import (
    EventUris,
    HashMapEventStorage,
    RelevantEventSelector,
    SimpleEvent,
)
from pdslib.relevant_events import RelevantEvents


def _event(id_, epoch, key=1, source="blog.com"):
    uris = EventUris(source, ("shoes.com",), ("adtech.com",))
    return SimpleEvent(id=id_, epoch_number=epoch, event_key=key, uris=uris)


class _KeySelector(RelevantEventSelector):
    def __init__(self, key):
        self.key = key

    def is_relevant_event(self, event):
        return event.event_key == self.key


def test_from_events_groups_by_epoch():
    e1, e2, e3 = _event(1, 1), _event(2, 2), _event(3, 1)
    relevant = RelevantEvents.from_events([e1, e2, e3])
    assert relevant.for_epoch(1) == (e1, e3)
    assert relevant.for_epoch(2) == (e2,)


def test_for_epoch_missing_is_empty():
    relevant = RelevantEvents.from_events([_event(1, 1)])
    assert relevant.for_epoch(9) == ()


def test_sources_for_epoch_are_unique():
    relevant = RelevantEvents.from_events(
        [_event(1, 1), _event(2, 1), _event(3, 1, source="news.ex"), _event(4, 2, source="x")]
    )
    assert relevant.sources_for_epoch(1) == {"blog.com", "news.ex"}
    assert relevant.sources_for_epoch(3) == set()


def test_drop_epoch():
    relevant = RelevantEvents.from_events([_event(1, 1), _event(2, 2)])
    relevant.drop_epoch(1)
    relevant.drop_epoch(7)
    assert relevant.for_epoch(1) == ()
    assert len(relevant.for_epoch(2)) == 1


def test_from_event_storage_filters_and_keeps_requested_epochs():
    storage = HashMapEventStorage(
        [_event(1, 1, key=1), _event(2, 1, key=2), _event(3, 2, key=1), _event(4, 3, key=1)]
    )
    relevant = RelevantEvents.from_event_storage(storage, [1, 2, 5], _KeySelector(1))
    assert [e.id for e in relevant.for_epoch(1)] == [1]
    assert [e.id for e in relevant.for_epoch(2)] == [3]
    assert relevant.for_epoch(3) == ()
    assert set(relevant.events_per_epoch) == {1, 2, 5}


def test_copy_is_independent():
    relevant = RelevantEvents.from_mapping({1: [_event(1, 1)]})
    clone = copy.copy(relevant)
    clone.drop_epoch(1)
    assert len(relevant.for_epoch(1)) == 1
    assert clone.for_epoch(1) == ()