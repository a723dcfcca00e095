"""Core of the private data service: budget accounting and report filtering."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Mapping

from pdslib.accounting import compute_epoch_loss, compute_epoch_source_losses
from pdslib.filter_storage import FilterStorage
from pdslib.filters import FilterStatus
from pdslib.quotas import (
    FilterId,
    Global,
    PdsFilterStatus,
    PerQuerier,
    SourceQuota,
    TriggerQuota,
)
from pdslib.relevant_events import RelevantEvents
from pdslib.report_request import EpochReportRequest, ReportRequestUris

logger = logging.getLogger(__name__)


@dataclass
class PdsReport:
    """A report with debugging information.

    ``oob_filters`` lists the filters that were out of budget in the atomic
    check of any epoch in the attribution window.
    """

    filtered_report: Any
    unfiltered_report: Any
    oob_filters: List[FilterId] = field(default_factory=list)

    @classmethod
    def null(cls, request: EpochReportRequest) -> "PdsReport":
        """The null report for ``request``."""
        return cls(request.null_report(), request.null_report(), [])


class PrivateDataServiceCore:
    """Computes reports while deducting privacy loss from filters."""

    def __init__(self, filter_storage: FilterStorage) -> None:
        self.filter_storage = filter_storage

    def compute_report(
        self, request: EpochReportRequest, relevant_events: RelevantEvents
    ) -> PdsReport:
        """Compute a report, dropping epochs that are out of budget.

        The given ``relevant_events`` are left untouched.
        """
        logger.debug("Computing report for request %r", request)

        uris = request.report_uris
        if len(uris.querier_uris) > 1:
            raise ValueError("multi-beneficiary queries are not supported")

        events = copy.copy(relevant_events)
        epochs = request.epoch_ids()
        num_epochs = len(epochs)

        unfiltered_report = request.compute_report(events)

        oob_filters: List[FilterId] = []
        for epoch_id in epochs:
            epoch_events = events.for_epoch(epoch_id)
            loss = compute_epoch_loss(
                request, epoch_events, unfiltered_report, num_epochs
            )
            source_losses = compute_epoch_source_losses(
                request,
                events.sources_for_epoch(epoch_id),
                unfiltered_report,
                num_epochs,
            )
            to_consume = self.filters_to_consume(epoch_id, loss, source_losses, uris)

            check = self.deduct_budget(to_consume, dry_run=True)
            if check.is_continue:
                consumed = self.deduct_budget(to_consume, dry_run=False)
                if not consumed.is_continue:
                    raise RuntimeError(
                        f"phase 2 failed with status {consumed!r} "
                        "after phase 1 succeeded"
                    )
            else:
                events.drop_epoch(epoch_id)
                oob_filters.extend(check.oob_filters)

        logger.debug("Relevant events after filtering OOB epochs: %r", events)
        filtered_report = request.compute_report(events)
        logger.debug("Filtered report: %r", filtered_report)

        return PdsReport(filtered_report, unfiltered_report, oob_filters)

    def filters_to_consume(
        self,
        epoch_id: Hashable,
        loss: float,
        source_losses: Mapping[Hashable, float],
        uris: ReportRequestUris,
    ) -> Dict[FilterId, float]:
        """Which filters to deduct from, and how much, for one epoch."""
        result: Dict[FilterId, float] = {
            PerQuerier(epoch_id, querier): loss for querier in uris.querier_uris
        }
        result[TriggerQuota(epoch_id, uris.trigger_uri)] = loss
        result[Global(epoch_id)] = loss
        for source, source_loss in source_losses.items():
            result[SourceQuota(epoch_id, source)] = source_loss
        return result

    def deduct_budget(
        self, filters_to_consume: Mapping[FilterId, float], dry_run: bool
    ) -> PdsFilterStatus:
        """Check or consume the losses; report the filters out of budget."""
        oob_filters = []
        for filter_id, loss in filters_to_consume.items():
            if dry_run:
                status = self.filter_storage.can_consume(filter_id, loss)
            else:
                status = self.filter_storage.try_consume(filter_id, loss)
            if status is FilterStatus.OUT_OF_BUDGET:
                oob_filters.append(filter_id)

        if oob_filters:
            return PdsFilterStatus.exhausted(oob_filters)
        return PdsFilterStatus.passed()