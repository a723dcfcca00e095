"""Filter identifiers, default capacities and atomic check outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Hashable, Tuple, Union


@dataclass(frozen=True)
class PerQuerier:
    """Non-collusion filter for one querier in one epoch."""

    epoch_id: Hashable
    uri: Hashable

    def __str__(self) -> str:
        return f"PerQuerier({self.epoch_id}, {self.uri})"


@dataclass(frozen=True)
class Global:
    """Collusion filter tracking the overall privacy loss of an epoch."""

    epoch_id: Hashable

    def __str__(self) -> str:
        return f"Global({self.epoch_id})"


@dataclass(frozen=True)
class TriggerQuota:
    """Quota on Global consumption for one trigger URI in one epoch."""

    epoch_id: Hashable
    uri: Hashable

    def __str__(self) -> str:
        return f"TriggerQuota({self.epoch_id}, {self.uri})"


@dataclass(frozen=True)
class SourceQuota:
    """Quota on Global consumption for one source URI in one epoch."""

    epoch_id: Hashable
    uri: Hashable

    def __str__(self) -> str:
        return f"SourceQuota({self.epoch_id}, {self.uri})"


FilterId = Union[PerQuerier, Global, TriggerQuota, SourceQuota]


@dataclass
class StaticCapacities:
    """Default capacity for each kind of filter."""

    per_querier: Any
    global_: Any
    trigger_quota: Any
    source_quota: Any

    def capacity(self, filter_id: FilterId) -> Any:
        """Capacity a new filter with this identifier starts with."""
        match filter_id:
            case PerQuerier():
                return self.per_querier
            case Global():
                return self.global_
            case TriggerQuota():
                return self.trigger_quota
            case SourceQuota():
                return self.source_quota
        raise TypeError(f"not a filter identifier: {filter_id!r}")

    @classmethod
    def mock(cls) -> "StaticCapacities":
        """Sample capacities for tests and demos."""
        return cls(1.0, 20.0, 1.5, 4.0)


@dataclass(frozen=True)
class PdsFilterStatus:
    """Outcome of an atomic check over several filters.

    When ``out_of_budget`` is set, ``oob_filters`` lists the filters that
    were out of budget, if known; it may be empty.
    """

    out_of_budget: bool = False
    oob_filters: Tuple[FilterId, ...] = field(default=())

    @classmethod
    def passed(cls) -> "PdsFilterStatus":
        """No filter was out of budget."""
        return cls(False, ())

    @classmethod
    def exhausted(cls, oob_filters=()) -> "PdsFilterStatus":
        """At least one filter was out of budget."""
        return cls(True, tuple(oob_filters))

    @property
    def is_continue(self) -> bool:
        return not self.out_of_budget