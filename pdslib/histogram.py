"""Generic histogram reports and requests."""

from __future__ import annotations

import math
from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Mapping, Tuple

from pdslib.events import Event
from pdslib.mechanisms import NormType
from pdslib.report_request import EpochReportRequest


@dataclass
class HistogramReport:
    """Histogram as a mapping of bucket key to value. Empty is null."""

    bin_values: Dict[Hashable, float] = field(default_factory=dict)


class HistogramRequest(EpochReportRequest):
    """A histogram request with the matching accounting.

    Implementations expose ``attributable_value``, the maximum value
    attributable to all events of a single epoch (A^max).
    """

    attributable_value: float

    @abstractmethod
    def bucket_key(self, event: Event) -> Hashable:
        """Histogram bucket for an event."""

    @abstractmethod
    def event_values(self, relevant_events) -> List[Tuple[Event, float]]:
        """Attribute values to relevant events, in attribution order.

        Events with value 0 may be left out.
        """

    def map_events_to_buckets(
        self, event_values: Mapping[Event, float]
    ) -> HistogramReport:
        """Sum event values by bucket, stopping before the cap is exceeded."""
        bin_values: Dict[Hashable, float] = {}
        total = 0.0
        for event, value in event_values.items():
            total += value
            if total > self.attributable_value:
                break
            bin_ = self.bucket_key(event)
            bin_values[bin_] = bin_values.get(bin_, 0.0) + value
        return HistogramReport(bin_values)

    def compute_report(self, relevant_events) -> HistogramReport:
        return self.map_events_to_buckets(dict(self.event_values(relevant_events)))

    def null_report(self) -> HistogramReport:
        return HistogramReport()

    def histogram_single_epoch_individual_sensitivity(
        self, report: HistogramReport, norm_type: NormType
    ) -> float:
        """Norm of the report, for the single epoch case."""
        values = report.bin_values.values()
        if norm_type is NormType.L1:
            return sum(values)
        return math.sqrt(sum(x * x for x in values))

    def histogram_single_epoch_source_individual_sensitivity(
        self, report: HistogramReport, norm_type: NormType
    ) -> float:
        """Norm of the report, for the single epoch-source case."""
        return self.histogram_single_epoch_individual_sensitivity(report, norm_type)

    def histogram_multi_epoch_report_global_sensitivity(self) -> float:
        """Global sensitivity over several epochs: 2 * A^max."""
        return 2.0 * self.attributable_value

    def histogram_single_epoch_report_global_sensitivity(self) -> float:
        """Global sensitivity over a single epoch: A^max."""
        return self.attributable_value

    def single_epoch_individual_sensitivity(
        self, report: HistogramReport, norm_type: NormType
    ) -> float:
        return self.histogram_single_epoch_individual_sensitivity(report, norm_type)

    def single_epoch_source_individual_sensitivity(
        self, report: HistogramReport, norm_type: NormType
    ) -> float:
        return self.histogram_single_epoch_source_individual_sensitivity(
            report, norm_type
        )