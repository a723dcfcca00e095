import pytest

from pdslib.events import EventUris, PpaEvent
from pdslib.histogram import HistogramReport, HistogramRequest
from pdslib.mechanisms import LaplaceNoise, NormType
from pdslib.relevant_events import RelevantEvents
from pdslib.report_request import ReportRequestUris


class _AllEventsRequest(HistogramRequest):
    """Gives each relevant event a fixed value, browsing epochs in order."""

    def __init__(self, attributable_value, per_event_value, epochs):
        self.attributable_value = attributable_value
        self.per_event_value = per_event_value
        self.epochs = epochs
        self.report_uris = ReportRequestUris.mock()

    def epoch_ids(self):
        return list(self.epochs)

    def bucket_key(self, event):
        return event.histogram_index

    def event_values(self, relevant_events):
        return [
            (e, self.per_event_value)
            for epoch in self.epoch_ids()
            for e in relevant_events.for_epoch(epoch)
        ]

    def report_global_sensitivity(self):
        return self.attributable_value

    def noise_scale(self):
        return LaplaceNoise(1.0)


def _event(id_, bucket, epoch=1):
    return PpaEvent(
        id=id_,
        timestamp=id_,
        epoch_number=epoch,
        histogram_index=bucket,
        uris=EventUris.mock(),
        filter_data=1,
    )


def test_map_events_to_buckets_separate_bins():
    request = _AllEventsRequest(10.0, 1.0, [1])
    report = request.map_events_to_buckets({_event(1, 0): 4.0, _event(2, 1): 5.0})
    assert report.bin_values == {0: 4.0, 1: 5.0}


def test_map_events_same_bin_sums_inputs():
    request = _AllEventsRequest(10.0, 1.0, [1])
    values = {_event(1, 3): 2.5, _event(2, 3): 1.5}
    report = request.map_events_to_buckets(values)
    assert set(report.bin_values) == {3}
    assert report.bin_values[3] == pytest.approx(sum(values.values()))


def test_map_events_stops_at_cap():
    request = _AllEventsRequest(10.0, 1.0, [1])
    report = request.map_events_to_buckets({_event(1, 0): 6.0, _event(2, 1): 6.0})
    assert report.bin_values == {0: 6.0}


def test_map_events_empty_is_null_report():
    request = _AllEventsRequest(10.0, 1.0, [1])
    assert request.map_events_to_buckets({}) == request.null_report()
    assert request.null_report() == HistogramReport()


def test_compute_report_uses_event_values():
    request = _AllEventsRequest(10.0, 2.0, [2, 1])
    relevant = RelevantEvents.from_events([_event(1, 0, 1), _event(2, 1, 2)])
    report = request.compute_report(relevant)
    assert report.bin_values == {0: 2.0, 1: 2.0}


def test_individual_sensitivity_norms():
    request = _AllEventsRequest(10.0, 1.0, [1])
    report = HistogramReport({0: 3.0, 1: 4.0})
    assert request.single_epoch_individual_sensitivity(report, NormType.L1) == 7.0
    assert request.single_epoch_individual_sensitivity(report, NormType.L2) == 5.0
    assert request.single_epoch_source_individual_sensitivity(
        report, NormType.L1
    ) == request.histogram_single_epoch_individual_sensitivity(report, NormType.L1)


def test_null_report_has_zero_sensitivity():
    request = _AllEventsRequest(10.0, 1.0, [1])
    null = HistogramReport()
    l1 = HistogramRequest.histogram_single_epoch_individual_sensitivity(
        request, null, NormType.L1
    )
    l2 = HistogramRequest.histogram_single_epoch_individual_sensitivity(
        request, null, NormType.L2
    )
    assert l1 == 0
    assert l2 == 0


def test_global_sensitivities():
    request = _AllEventsRequest(10.0, 1.0, [1])
    single = HistogramRequest.histogram_single_epoch_report_global_sensitivity(request)
    multi = HistogramRequest.histogram_multi_epoch_report_global_sensitivity(request)
    assert single == 10.0
    assert multi == 20.0