"""Storage for collections of privacy filters."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import Callable, Dict, Hashable, Optional, TypeVar

from pdslib.filters import Filter, FilterStatus, PureDPBudgetFilter

R = TypeVar("R")


class FilterStorage(ABC):
    """A collection of filters keyed by filter identifier.

    New filters are built by ``filter_factory(capacity)``, with the capacity
    given by ``capacities.capacity(filter_id)``. For the privacy proof to
    hold, the capacities must not change and ``get_filter`` must return
    exactly what ``set_filter`` stored.
    """

    def __init__(
        self,
        capacities,
        filter_factory: Callable[[object], Filter] = PureDPBudgetFilter,
    ) -> None:
        self.capacities = capacities
        self.filter_factory = filter_factory

    @abstractmethod
    def get_filter(self, filter_id: Hashable) -> Optional[Filter]:
        """Return the stored filter, or None if it was never set."""

    @abstractmethod
    def set_filter(self, filter_id: Hashable, filter: Filter) -> None:
        """Store ``filter`` under ``filter_id``."""

    def get_filter_or_new(self, filter_id: Hashable) -> Filter:
        """Return the stored filter, or a fresh one with default capacity."""
        existing = self.get_filter(filter_id)
        if existing is not None:
            return existing
        return self.filter_factory(self.capacities.capacity(filter_id))

    def edit_filter_or_new(
        self, filter_id: Hashable, edit: Callable[[Filter], R]
    ) -> R:
        """Apply ``edit`` to the filter (created if needed) and store it."""
        f = self.get_filter_or_new(filter_id)
        result = edit(f)
        self.set_filter(filter_id, f)
        return result

    def can_consume(self, filter_id: Hashable, budget: float) -> FilterStatus:
        """Check whether ``budget`` fits, without changing any state."""
        return self.get_filter_or_new(filter_id).can_consume(budget)

    def try_consume(self, filter_id: Hashable, budget: float) -> FilterStatus:
        """Consume ``budget`` from the filter, creating it if needed."""
        f = self.get_filter_or_new(filter_id)
        status = f.try_consume(budget)
        self.set_filter(filter_id, f)
        return status

    def remaining_budget(self, filter_id: Hashable) -> float:
        """Budget left in a filter. For testing and local inspection only."""
        f = self.get_filter(filter_id)
        if f is None:
            return self.capacities.capacity(filter_id)
        return f.remaining_budget()


class HashMapFilterStorage(FilterStorage):
    """In-memory filter storage backed by a dict."""

    def __init__(
        self,
        capacities,
        filter_factory: Callable[[object], Filter] = PureDPBudgetFilter,
    ) -> None:
        super().__init__(capacities, filter_factory)
        self.filters: Dict[Hashable, Filter] = {}

    def get_filter(self, filter_id: Hashable) -> Optional[Filter]:
        f = self.filters.get(filter_id)
        return copy.copy(f) if f is not None else None

    def set_filter(self, filter_id: Hashable, filter: Filter) -> None:
        self.filters[filter_id] = filter