"""Privacy filters for pure differential privacy budgets."""

from __future__ import annotations

import enum
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

# Budgets are plain floats (epsilon); ``math.inf`` means infinite budget.
PureDPBudget = float


class FilterStatus(enum.Enum):
    """Outcome of a filter check: CONTINUE or HALT (out of budget)."""

    CONTINUE = "continue"
    OUT_OF_BUDGET = "out_of_budget"


class Filter(ABC):
    """A privacy filter. Subclasses are built from a single capacity."""

    @abstractmethod
    def can_consume(self, budget: float) -> FilterStatus:
        """Check whether ``budget`` fits, without consuming it."""

    @abstractmethod
    def try_consume(self, budget: float) -> FilterStatus:
        """Consume ``budget`` if it fits and report the outcome."""

    @abstractmethod
    def remaining_budget(self) -> float:
        """Budget left in the filter. For local inspection only."""


class ReleaseFilter(Filter):
    """A filter whose budget is unlocked gradually.

    Implementations expose a writable ``capacity`` attribute.
    """

    capacity: float

    @abstractmethod
    def release(self, budget_to_unlock: float) -> None:
        """Unlock more budget, never beyond the capacity."""


@dataclass
class PureDPBudgetFilter(Filter):
    """Pure DP filter. A capacity of ``None`` means infinite budget."""

    capacity: Optional[float]
    consumed: float = 0.0

    def can_consume(self, budget: float) -> FilterStatus:
        if self.capacity is None:
            return FilterStatus.CONTINUE

        remaining = self.capacity - self.consumed
        diff = abs(remaining - budget)
        if 0.0 < diff < 1e-9:
            logger.warning(
                "can_consume: difference between remaining budget (%s) and "
                "requested budget (%s) is very small, diff = %s",
                remaining,
                budget,
                diff,
            )

        if self.consumed + budget > self.capacity:
            return FilterStatus.OUT_OF_BUDGET
        return FilterStatus.CONTINUE

    def try_consume(self, budget: float) -> FilterStatus:
        logger.debug(
            "Consumed %r of capacity %r, requesting %r",
            self.consumed,
            self.capacity,
            budget,
        )
        status = self.can_consume(budget)
        if status is FilterStatus.CONTINUE:
            self.consumed += budget
        return status

    def remaining_budget(self) -> float:
        if self.capacity is None:
            return math.inf
        return self.capacity - self.consumed


@dataclass
class PureDPBudgetReleaseFilter(ReleaseFilter):
    """Pure DP filter whose budget must be released before it is spent."""

    capacity: float
    consumed: float = 0.0
    unlocked: float = 0.0

    def can_consume(self, budget: float) -> FilterStatus:
        # Infinite filters accept every request, even infinite ones.
        if self.capacity == math.inf:
            return FilterStatus.CONTINUE
        if budget == math.inf:
            return FilterStatus.OUT_OF_BUDGET
        if self.consumed + budget <= self.unlocked:
            return FilterStatus.CONTINUE
        return FilterStatus.OUT_OF_BUDGET

    def try_consume(self, budget: float) -> FilterStatus:
        status = self.can_consume(budget)
        if status is FilterStatus.CONTINUE:
            self.consumed += budget
        return status

    def remaining_budget(self) -> float:
        return self.capacity - self.consumed

    def release(self, budget_to_unlock: float) -> None:
        if self.capacity == math.inf:
            self.unlocked += budget_to_unlock
        else:
            self.unlocked = min(self.capacity, self.unlocked + budget_to_unlock)