"""Attribution shared across queriers, with per-querier reports."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Dict, Hashable, List

from pdslib.accounting import compute_epoch_loss
from pdslib.core import PdsReport, PrivateDataServiceCore
from pdslib.events import PpaEvent
from pdslib.filter_storage import FilterStorage
from pdslib.filters import FilterStatus
from pdslib.ppa_histogram import (
    PpaHistogramRequest,
    PpaRelevantEventSelector,
    RequestedBuckets,
)
from pdslib.quotas import FilterId, PerQuerier
from pdslib.relevant_events import RelevantEvents

logger = logging.getLogger(__name__)


@dataclass
class AttributionObject:
    """Attribution computed once, from which each querier gets a report.

    A histogram bucket can be requested only once; asking for it again
    yields a null report. Once every bucket has been requested,
    ``already_requested_buckets`` covers all buckets.
    """

    request: PpaHistogramRequest
    events: RelevantEvents
    event_values: Dict[PpaEvent, float]
    already_requested_buckets: RequestedBuckets = field(
        default_factory=lambda: RequestedBuckets.specific(())
    )

    def get_report(
        self,
        beneficiary_uri: Hashable,
        relevant_event_selector: PpaRelevantEventSelector,
        filter_storage: FilterStorage,
    ) -> PdsReport:
        """Report for one querier, deducting its per-querier loss."""
        epochs = self.request.epoch_ids()
        num_epochs = len(epochs)

        if self.already_requested_buckets.is_all:
            logger.debug("All buckets already requested, returning null report")
            return PdsReport.null(self.request)

        requested = relevant_event_selector.requested_buckets
        if requested.is_all:
            self.already_requested_buckets = RequestedBuckets.all_buckets()
        else:
            already = self.already_requested_buckets.buckets
            if already & requested.buckets:
                logger.debug(
                    "Some buckets already requested, returning null report"
                )
                return PdsReport.null(self.request)
            already.update(requested.buckets)

        event_values: Dict[PpaEvent, float] = {}
        for epoch_id in epochs:
            for event in self.events.for_epoch(epoch_id):
                if event.histogram_index in requested and event in self.event_values:
                    event_values[event] = self.event_values[event]

        # Epochs out of budget for the other filters were already dropped by
        # measure_conversion; this report is before the per-querier filter.
        unfiltered_report = self.request.map_events_to_buckets(event_values)

        oob_filters: List[FilterId] = []
        for epoch_id in epochs:
            epoch_events = self.events.for_epoch(epoch_id)
            loss = compute_epoch_loss(
                self.request, epoch_events, unfiltered_report, num_epochs
            )
            filter_id = PerQuerier(epoch_id, beneficiary_uri)
            status = filter_storage.try_consume(filter_id, loss)
            if status is FilterStatus.OUT_OF_BUDGET:
                for event in epoch_events:
                    event_values.pop(event, None)
                oob_filters.append(filter_id)

        filtered_report = self.request.map_events_to_buckets(event_values)
        return PdsReport(filtered_report, unfiltered_report, oob_filters)


def measure_conversion(
    core: PrivateDataServiceCore,
    request: PpaHistogramRequest,
    relevant_events: RelevantEvents,
) -> AttributionObject:
    """Attribute the conversion and deduct the loss shared by all queriers.

    Global and quota filters are charged here; per-querier filters are
    charged by :meth:`AttributionObject.get_report`. Only global DP
    guarantees hold. The given ``relevant_events`` are left untouched.
    """
    uris = request.report_uris
    epochs = request.epoch_ids()
    events = copy.copy(relevant_events)

    if len(epochs) <= 1:
        logger.warning(
            "Cross-report optimization only saves budget when requesting more "
            "than 1 epoch. We recommend using the regular API otherwise."
        )

    for epoch_id in epochs:
        noise_scale = request.noise_scale().scale
        loss = request.histogram_multi_epoch_report_global_sensitivity() / noise_scale
        source_losses = {source: loss for source in uris.source_uris}

        to_consume = core.filters_to_consume(epoch_id, loss, source_losses, uris)
        for querier_uri in uris.querier_uris:
            to_consume.pop(PerQuerier(epoch_id, querier_uri), None)

        check = core.deduct_budget(to_consume, dry_run=True)
        if check.is_continue:
            consumed = core.deduct_budget(to_consume, dry_run=False)
            if not consumed.is_continue:
                raise RuntimeError(
                    f"phase 2 failed with status {consumed!r} "
                    "after phase 1 succeeded"
                )
        else:
            events.drop_epoch(epoch_id)

    event_values = dict(request.event_values(events))
    return AttributionObject(
        request=request,
        events=events,
        event_values=event_values,
        already_requested_buckets=RequestedBuckets.specific(()),
    )