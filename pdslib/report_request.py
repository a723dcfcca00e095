"""Report requests and the URIs they carry."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Hashable, List

from pdslib.events import RelevantEventSelector
from pdslib.mechanisms import LaplaceNoise, NormType


@dataclass
class ReportRequestUris:
    """URIs of a report request.

    ``trigger_uri`` triggered the report, ``source_uris`` may contribute
    events and ``querier_uris`` will receive the report.
    """

    trigger_uri: Hashable
    source_uris: List[Hashable] = field(default_factory=list)
    querier_uris: List[Hashable] = field(default_factory=list)

    @classmethod
    def mock(cls) -> "ReportRequestUris":
        """Sample URIs for tests and demos."""
        return cls(
            trigger_uri="shoes.com",
            source_uris=["blog.com"],
            querier_uris=["adtech.com"],
        )


class EpochReportRequest(ABC):
    """An epoch-based query.

    Implementations expose ``report_uris`` (a :class:`ReportRequestUris`)
    and ``relevant_event_selector`` (a :class:`RelevantEventSelector`).
    Reports must have a null value, returned by :meth:`null_report`, so
    that devices out of budget still send something.
    """

    report_uris: ReportRequestUris
    relevant_event_selector: RelevantEventSelector

    @abstractmethod
    def epoch_ids(self) -> List[Hashable]:
        """Requested epochs, in the order attribution runs through them."""

    @abstractmethod
    def compute_report(self, relevant_events) -> Any:
        """Compute the report over the given relevant events."""

    @abstractmethod
    def single_epoch_individual_sensitivity(
        self, report: Any, norm_type: NormType
    ) -> float:
        """Individual sensitivity when the report covers a single epoch."""

    @abstractmethod
    def single_epoch_source_individual_sensitivity(
        self, report: Any, norm_type: NormType
    ) -> float:
        """Individual sensitivity when the report covers one epoch-source."""

    @abstractmethod
    def report_global_sensitivity(self) -> float:
        """Global sensitivity of the report."""

    @abstractmethod
    def noise_scale(self) -> LaplaceNoise:
        """Noise the aggregator will add."""

    @abstractmethod
    def null_report(self) -> Any:
        """The empty report."""


@dataclass
class PassivePrivacyLossRequest:
    """Uniform passive privacy loss over a set of epochs."""

    epoch_ids: List[Hashable]
    privacy_budget: float
    uris: ReportRequestUris