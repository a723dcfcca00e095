# pdslib

A library for an on-device private data service. A device records events,
such as ad impressions. When a conversion happens, the device answers report
requests and accounts for the privacy loss under pure differential privacy.
Privacy loss is tracked per epoch with privacy filters: one per querier, one
global filter, and quotas per trigger site and per source site.

## Installation

```
pip install pdslib
```

The package has no third-party dependencies. The test suite needs pytest:

```
pip install "pdslib[test]"
pytest
```

## Concepts

- **Events** (`pdslib.events`): `SimpleEvent` and `PpaEvent` carry an epoch
  number and `EventUris`: the source, the allowed triggers and the allowed
  queriers. `HashMapEventStorage` keeps events in memory, grouped by epoch.
  `RelevantEventSelector` and `EventStorage` are the abstract interfaces.
- **Relevant events** (`pdslib.relevant_events`): `RelevantEvents` groups
  the relevant events of each epoch. It can be built from an event storage
  and a selector, from a mapping, or from a flat list of events.
- **Filters** (`pdslib.filters`): `PureDPBudgetFilter` holds a capacity in
  epsilon and returns `FilterStatus.CONTINUE` or
  `FilterStatus.OUT_OF_BUDGET`. A capacity of `None` means infinite budget.
  `PureDPBudgetReleaseFilter` only lets budget be spent after it has been
  unlocked with `release`, and never more than its capacity.
- **Filter identifiers and capacities** (`pdslib.quotas`): `PerQuerier`,
  `Global`, `TriggerQuota` and `SourceQuota` name the filters of one epoch.
  `StaticCapacities` gives the default capacity of each kind of filter, and
  `StaticCapacities.mock()` gives sample values (1.0, 20.0, 1.5, 4.0).
  `PdsFilterStatus` is the outcome of an atomic check over several filters.
- **Filter storage** (`pdslib.filter_storage`): `HashMapFilterStorage`
  creates a filter on first use, with its default capacity, through a
  `filter_factory` (by default `PureDPBudgetFilter`).
- **Mechanisms** (`pdslib.mechanisms`): `LaplaceNoise` and `NormType`.
- **Requests**: `pdslib.report_request` defines `EpochReportRequest`,
  `ReportRequestUris` and `PassivePrivacyLossRequest`. `pdslib.histogram`
  defines `HistogramRequest` and `HistogramReport`.
  `pdslib.ppa_histogram.PpaHistogramRequest` does last-touch attribution
  into a histogram. `pdslib.simple_histogram.SimpleLastTouchHistogramRequest`
  is a minimal single-bin variant.
- **Accounting** (`pdslib.accounting`): `compute_epoch_loss` and
  `compute_epoch_source_losses` compute the individual privacy loss of a
  device-epoch and of each device-epoch-source.
- **Service** (`pdslib.private_data_service`, `pdslib.core`):
  `PrivateDataService` registers events and computes reports. For each epoch
  in the attribution window it deducts budget in two phases, a dry run and
  then the commit. Any epoch that is out of budget is dropped from the
  report. A `PdsReport` holds the filtered report, the report computed
  before filtering, and the identifiers of the filters that were out of
  budget. `simple_pds` and `ppa_pds` build an in-memory service from
  `StaticCapacities`.

## Example

```python
from pdslib.events import EventUris, PpaEvent
from pdslib.ppa_histogram import (
    PpaHistogramConfig,
    PpaHistogramRequest,
    PpaRelevantEventSelector,
    RequestedBuckets,
)
from pdslib.private_data_service import ppa_pds
from pdslib.quotas import StaticCapacities
from pdslib.report_request import ReportRequestUris

pds = ppa_pds(StaticCapacities.mock())

pds.register_event(
    PpaEvent(
        id=1,
        timestamp=0,
        epoch_number=1,
        histogram_index=0x559,
        uris=EventUris.mock(),
        filter_data=1,
    )
)

selector = PpaRelevantEventSelector(
    report_request_uris=ReportRequestUris.mock(),
    is_matching_event=lambda filter_data: filter_data == 1,
    requested_buckets=RequestedBuckets.specific([0x559]),
)
request = PpaHistogramRequest.from_config(
    PpaHistogramConfig(
        start_epoch=1,
        end_epoch=2,
        attributable_value=32768.0,
        max_attributable_value=65536.0,
        requested_epsilon=1.0,
        histogram_size=2048,
    ),
    selector,
)

report = pds.compute_report(request)
print(report.filtered_report.bin_values)  # {1369: 32768.0}
```

Invalid request parameters raise `ValueError`. One example is a requested
epsilon that is not positive. A request with more than one querier URI is
also rejected with `ValueError` by `compute_report`.

## Cross-report optimisation

`pdslib.cross_report.measure_conversion(core, request, relevant_events)`
attributes a conversion once. It charges the global filter and the quotas a
single time and returns an `AttributionObject`. Each querier then calls
`AttributionObject.get_report(beneficiary_uri, selector, filter_storage)`.
That call charges only the querier's own per-querier filter. A histogram
bucket can be requested only once; asking for it again gives a null report.
This API gives global differential privacy guarantees only.

## Passive privacy loss

`PrivateDataService.account_for_passive_privacy_loss` charges a fixed budget
to the per-querier, global and trigger filters of each listed epoch, in
order. At the first epoch whose atomic check fails, that epoch is left
untouched and the call returns its `PdsFilterStatus`. Epochs charged before
it stay charged.

## Limitations

- Storage is in memory only. For persistent storage, subclass
  `FilterStorage` or `EventStorage`.
- There is no command-line tool and no server; the package is a library.
- Budgets are plain floats. Floating-point rounding is not handled
  specially.