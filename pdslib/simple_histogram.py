"""A minimal last-touch histogram request over simple events."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from pdslib.events import RelevantEventSelector, SimpleEvent
from pdslib.mechanisms import LaplaceNoise, NormType
from pdslib.report_request import EpochReportRequest, ReportRequestUris


@dataclass(frozen=True)
class SimpleRelevantEventSelector(RelevantEventSelector):
    """Selects events with a plain predicate."""

    predicate: Callable[[SimpleEvent], bool]

    def is_relevant_event(self, event: SimpleEvent) -> bool:
        return bool(self.predicate(event))


@dataclass
class SimpleLastTouchHistogramReport:
    """At most one bin: ``(bucket key, attributed value)``, or None."""

    bin_value: Optional[Tuple[int, float]] = None


def _divide(numerator: float, denominator: float) -> float:
    if denominator == 0.0:
        if numerator == 0.0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


@dataclass
class SimpleLastTouchHistogramRequest(EpochReportRequest):
    """Attributes ``report_sensitivity`` to the last relevant event.

    ``report_sensitivity`` is the report global sensitivity, which is also
    the value attributed.
    """

    epoch_start: int
    epoch_end: int
    report_sensitivity: float
    query_global_sensitivity: float
    requested_epsilon: float
    relevant_event_selector: SimpleRelevantEventSelector
    report_uris: ReportRequestUris

    def epoch_ids(self) -> List[int]:
        """Epochs from the most recent to the oldest."""
        return list(range(self.epoch_end, self.epoch_start - 1, -1))

    def compute_report(self, relevant_events) -> SimpleLastTouchHistogramReport:
        # Events of an epoch are assumed to be stored in order of occurrence.
        for epoch_id in self.epoch_ids():
            events = relevant_events.for_epoch(epoch_id)
            if events:
                return SimpleLastTouchHistogramReport(
                    (events[-1].event_key, self.report_sensitivity)
                )
        return SimpleLastTouchHistogramReport()

    def single_epoch_individual_sensitivity(
        self, report: SimpleLastTouchHistogramReport, norm_type: NormType
    ) -> float:
        # At most one non-zero bin, so L1 and L2 norms coincide.
        if report.bin_value is None:
            return 0.0
        return abs(report.bin_value[1])

    def single_epoch_source_individual_sensitivity(
        self, report: SimpleLastTouchHistogramReport, norm_type: NormType
    ) -> float:
        return self.single_epoch_individual_sensitivity(report, norm_type)

    def report_global_sensitivity(self) -> float:
        return self.report_sensitivity

    def noise_scale(self) -> LaplaceNoise:
        return LaplaceNoise(
            _divide(self.query_global_sensitivity, self.requested_epsilon)
        )

    def null_report(self) -> SimpleLastTouchHistogramReport:
        return SimpleLastTouchHistogramReport()