"""Epoch-based private data service over filter and event storage."""

from __future__ import annotations

import logging

from pdslib.core import PdsReport, PrivateDataServiceCore
from pdslib.events import Event, EventStorage, HashMapEventStorage
from pdslib.filter_storage import FilterStorage, HashMapFilterStorage
from pdslib.filters import PureDPBudgetFilter
from pdslib.quotas import PdsFilterStatus, StaticCapacities
from pdslib.relevant_events import RelevantEvents
from pdslib.report_request import EpochReportRequest, PassivePrivacyLossRequest

logger = logging.getLogger(__name__)


class PrivateDataService:
    """Stores events and answers report requests under privacy filters."""

    def __init__(
        self, filter_storage: FilterStorage, event_storage: EventStorage
    ) -> None:
        self.core = PrivateDataServiceCore(filter_storage)
        self.event_storage = event_storage

    def register_event(self, event: Event) -> None:
        """Store a new event."""
        logger.debug("Registering event %r", event)
        self.event_storage.add_event(event)

    def compute_report(self, request: EpochReportRequest) -> PdsReport:
        """Compute a report for ``request`` over the stored events."""
        relevant_events = RelevantEvents.from_event_storage(
            self.event_storage,
            request.epoch_ids(),
            request.relevant_event_selector,
        )
        return self.core.compute_report(request, relevant_events)

    def account_for_passive_privacy_loss(
        self, request: PassivePrivacyLossRequest
    ) -> PdsFilterStatus:
        """Deduct a uniform loss from each epoch, stopping at the first
        epoch that is out of budget."""
        for epoch_id in request.epoch_ids:
            to_consume = self.core.filters_to_consume(
                epoch_id, request.privacy_budget, {}, request.uris
            )
            check = self.core.deduct_budget(to_consume, dry_run=True)
            if not check.is_continue:
                return check
            consumed = self.core.deduct_budget(to_consume, dry_run=False)
            if not consumed.is_continue:
                raise RuntimeError(
                    f"phase 2 failed with status {consumed!r} "
                    "after phase 1 succeeded"
                )
        return PdsFilterStatus.passed()


def simple_pds(capacities: StaticCapacities) -> PrivateDataService:
    """In-memory service for simple events and pure DP filters."""
    return PrivateDataService(
        HashMapFilterStorage(capacities, PureDPBudgetFilter), HashMapEventStorage()
    )


def ppa_pds(capacities: StaticCapacities) -> PrivateDataService:
    """In-memory service for PPA events and pure DP filters."""
    return PrivateDataService(
        HashMapFilterStorage(capacities, PureDPBudgetFilter), HashMapEventStorage()
    )