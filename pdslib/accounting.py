"""Individual privacy loss accounting for pure differential privacy."""

from __future__ import annotations

import logging
import math
import sys
from typing import Dict, Hashable, Sequence, Set

from pdslib.mechanisms import NormType
from pdslib.report_request import EpochReportRequest

logger = logging.getLogger(__name__)

_MACHINE_EPSILON = sys.float_info.epsilon


def compute_epoch_loss(
    request: EpochReportRequest,
    epoch_relevant_events: Sequence,
    computed_attribution,
    num_epochs: int,
) -> float:
    """Individual privacy loss of a device-epoch for this request."""
    if not epoch_relevant_events:
        return 0.0

    if num_epochs == 1:
        individual_sensitivity = request.single_epoch_individual_sensitivity(
            computed_attribution, NormType.L1
        )
    else:
        individual_sensitivity = request.report_global_sensitivity()

    logger.debug(
        "Individual sensitivity: %s for %s epochs", individual_sensitivity, num_epochs
    )

    noise_scale = request.noise_scale().scale
    # A near-zero noise scale means a non-private request: infinite loss.
    if abs(noise_scale) < _MACHINE_EPSILON:
        return math.inf
    return individual_sensitivity / noise_scale


def compute_epoch_source_losses(
    request: EpochReportRequest,
    epoch_event_sources: Set[Hashable],
    computed_attribution,
    num_epochs: int,
) -> Dict[Hashable, float]:
    """Privacy loss of each requested source in a device-epoch."""
    requested_sources = request.report_uris.source_uris
    noise_scale = request.noise_scale().scale
    single_source = len(requested_sources) == 1

    losses: Dict[Hashable, float] = {}
    for source in requested_sources:
        if source not in epoch_event_sources:
            individual_sensitivity = 0.0
        elif num_epochs == 1 and single_source:
            individual_sensitivity = request.single_epoch_source_individual_sensitivity(
                computed_attribution, NormType.L1
            )
        else:
            individual_sensitivity = request.report_global_sensitivity()

        if abs(noise_scale) < _MACHINE_EPSILON:
            losses[source] = math.inf
        else:
            losses[source] = individual_sensitivity / noise_scale
    return losses