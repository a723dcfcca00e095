"""Histogram requests following the Private Proportional Attribution spec."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import (
    Callable,
    Dict,
    Hashable,
    Iterable,
    List,
    Mapping,
    Optional,
    Set,
    Tuple,
)

from pdslib.events import PpaEvent, RelevantEventSelector
from pdslib.histogram import HistogramReport, HistogramRequest
from pdslib.mechanisms import LaplaceNoise, NormType
from pdslib.report_request import ReportRequestUris

logger = logging.getLogger(__name__)


@dataclass
class RequestedBuckets:
    """Histogram buckets a querier asks for. ``None`` means every bucket."""

    buckets: Optional[Set[Hashable]] = None

    @classmethod
    def all_buckets(cls) -> "RequestedBuckets":
        """Request every bucket."""
        return cls(None)

    @classmethod
    def specific(cls, buckets: Iterable[Hashable]) -> "RequestedBuckets":
        """Request only the given buckets."""
        return cls(set(buckets))

    @property
    def is_all(self) -> bool:
        return self.buckets is None

    def __contains__(self, bucket: Hashable) -> bool:
        return self.buckets is None or bucket in self.buckets


def _always(_filter_data: int) -> bool:
    return True


@dataclass
class PpaRelevantEventSelector(RelevantEventSelector):
    """Selects events by URIs and by a predicate on their filter data."""

    report_request_uris: ReportRequestUris
    is_matching_event: Callable[[int], bool] = _always
    requested_buckets: RequestedBuckets = field(
        default_factory=RequestedBuckets.all_buckets
    )

    def is_relevant_event(self, event: PpaEvent) -> bool:
        uris = self.report_request_uris
        source_match = event.uris.source_uri in uris.source_uris
        querier_match = all(uri in event.uris.querier_uris for uri in uris.querier_uris)
        trigger_match = uris.trigger_uri in event.uris.trigger_uris
        return (
            source_match
            and querier_match
            and trigger_match
            and bool(self.is_matching_event(event.filter_data))
        )


@dataclass
class PpaHistogramConfig:
    """Spec-compatible parameters: epsilon and query global sensitivity."""

    start_epoch: int
    end_epoch: int
    attributable_value: float
    max_attributable_value: float
    requested_epsilon: float
    histogram_size: int


@dataclass
class DirectPpaHistogramConfig:
    """Parameters that give the Laplace noise scale directly."""

    start_epoch: int
    end_epoch: int
    attributable_value: float
    laplace_noise_scale: float
    histogram_size: int


class AttributionLogic(enum.Enum):
    """How conversion value is spread across events."""

    LAST_TOUCH = "last_touch"


class PpaHistogramRequest(HistogramRequest):
    """A PPA histogram request with last-touch attribution."""

    def __init__(
        self,
        start_epoch: int,
        end_epoch: int,
        attributable_value: float,
        laplace_noise_scale: float,
        histogram_size: int,
        relevant_event_selector: PpaRelevantEventSelector,
        logic: AttributionLogic = AttributionLogic.LAST_TOUCH,
    ) -> None:
        self.start_epoch = start_epoch
        self.end_epoch = end_epoch
        self.attributable_value = attributable_value
        self.laplace_noise_scale = laplace_noise_scale
        self.histogram_size = histogram_size
        self.relevant_event_selector = relevant_event_selector
        self.logic = logic

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(start_epoch={self.start_epoch}, "
            f"end_epoch={self.end_epoch}, "
            f"attributable_value={self.attributable_value}, "
            f"laplace_noise_scale={self.laplace_noise_scale}, "
            f"histogram_size={self.histogram_size})"
        )

    @property
    def report_uris(self) -> ReportRequestUris:
        return self.relevant_event_selector.report_request_uris

    @classmethod
    def from_config(
        cls,
        config: PpaHistogramConfig,
        relevant_event_selector: PpaRelevantEventSelector,
    ) -> "PpaHistogramRequest":
        """Build from PPA-style parameters, deriving the noise scale."""
        if config.requested_epsilon <= 0.0:
            raise ValueError("epsilon scale must be > 0")
        if config.attributable_value < 0.0 or config.max_attributable_value < 0.0:
            raise ValueError("sensitivity values must be >= 0")
        if config.histogram_size == 0:
            raise ValueError("histogram_size must be greater than 0")

        if config.end_epoch == config.start_epoch:
            query_global_sensitivity = config.max_attributable_value
        else:
            query_global_sensitivity = 2.0 * config.max_attributable_value

        return cls(
            start_epoch=config.start_epoch,
            end_epoch=config.end_epoch,
            attributable_value=config.attributable_value,
            laplace_noise_scale=query_global_sensitivity / config.requested_epsilon,
            histogram_size=config.histogram_size,
            relevant_event_selector=relevant_event_selector,
        )

    @classmethod
    def from_direct_config(
        cls,
        config: DirectPpaHistogramConfig,
        relevant_event_selector: PpaRelevantEventSelector,
    ) -> "PpaHistogramRequest":
        """Build from a directly given Laplace noise scale."""
        if config.attributable_value <= 0.0:
            raise ValueError("attributable_value must be > 0")
        if config.laplace_noise_scale <= 0.0:
            raise ValueError("laplace_noise_scale must be > 0")
        if config.histogram_size == 0:
            raise ValueError("histogram_size must be greater than 0")
        return cls(
            start_epoch=config.start_epoch,
            end_epoch=config.end_epoch,
            attributable_value=config.attributable_value,
            laplace_noise_scale=config.laplace_noise_scale,
            histogram_size=config.histogram_size,
            relevant_event_selector=relevant_event_selector,
        )

    def epoch_ids(self) -> List[int]:
        """Epochs from the most recent to the oldest."""
        return list(range(self.end_epoch, self.start_epoch - 1, -1))

    def bucket_key(self, event: PpaEvent) -> int:
        if event.histogram_index >= self.histogram_size:
            logger.warning(
                "Invalid bucket key %s: exceeds histogram size %s. Event id: %s",
                event.histogram_index,
                self.histogram_size,
                event.id,
            )
        return event.histogram_index

    def event_values(self, relevant_events) -> List[Tuple[PpaEvent, float]]:
        """Give all the value to the most recent event with a valid bucket."""
        if self.logic is AttributionLogic.LAST_TOUCH:
            for epoch_id in self.epoch_ids():
                events = sorted(
                    relevant_events.for_epoch(epoch_id), key=lambda e: e.timestamp
                )
                for event in reversed(events):
                    if event.histogram_index < self.histogram_size:
                        return [(event, self.attributable_value)]
                    logger.error(
                        "Dropping event with id %s due to invalid bucket key %s",
                        event.id,
                        event.histogram_index,
                    )
        return []

    def compute_report(self, relevant_events) -> HistogramReport:
        return self.map_events_to_buckets(dict(self.event_values(relevant_events)))

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

    def report_global_sensitivity(self) -> float:
        if self.start_epoch == self.end_epoch:
            return self.histogram_single_epoch_report_global_sensitivity()
        return self.histogram_multi_epoch_report_global_sensitivity()

    def noise_scale(self) -> LaplaceNoise:
        return LaplaceNoise(self.laplace_noise_scale)

    def null_report(self) -> HistogramReport:
        return HistogramReport()


def filter_histogram_for_intermediary(
    full_histogram: Mapping[Hashable, float],
    intermediary_buckets: Iterable[Hashable],
) -> Dict[Hashable, float]:
    """Keep only the buckets an intermediary may see."""
    allowed = set(intermediary_buckets)
    return {key: value for key, value in full_histogram.items() if key in allowed}