import pytest

from pdslib.quotas import (
    Global,
    PdsFilterStatus,
    PerQuerier,
    SourceQuota,
    StaticCapacities,
    TriggerQuota,
)


def test_mock_capacities():
    caps = StaticCapacities.mock()
    assert caps.capacity(PerQuerier(1, "adtech.com")) == 1.0
    assert caps.capacity(Global(1)) == 20.0
    assert caps.capacity(TriggerQuota(1, "shoes.com")) == 1.5
    assert caps.capacity(SourceQuota(1, "blog.com")) == 4.0


def test_capacity_independent_of_epoch_and_uri():
    caps = StaticCapacities(0.001, 0.01, 0.002, 0.003)
    assert caps.capacity(Global(1)) == caps.capacity(Global(99))
    assert caps.capacity(PerQuerier(1, "a")) == caps.capacity(PerQuerier(7, "b"))
    assert caps.capacity(SourceQuota(2, "x")) == 0.003


def test_capacity_rejects_non_filter_id():
    with pytest.raises(TypeError):
        StaticCapacities.mock().capacity(("Global", 1))


def test_filter_id_display():
    assert str(PerQuerier(1, "adtech.com")) == "PerQuerier(1, adtech.com)"
    assert str(Global(3)) == "Global(3)"
    assert str(SourceQuota(2, "blog.com")) == "SourceQuota(2, blog.com)"


def test_filter_ids_hash_and_compare_by_value():
    ids = {PerQuerier(1, "q"), PerQuerier(1, "q"), TriggerQuota(1, "q")}
    assert len(ids) == 2
    assert PerQuerier(1, "q") == PerQuerier(1, "q")
    assert (PerQuerier(1, "q") == TriggerQuota(1, "q")) is False


def test_pds_filter_status():
    ok = PdsFilterStatus.passed()
    assert ok.is_continue
    assert ok == PdsFilterStatus()

    bad = PdsFilterStatus.exhausted([Global(1)])
    assert not bad.is_continue
    assert bad.oob_filters == (Global(1),)
    assert (bad == ok) is False

    empty = PdsFilterStatus.exhausted()
    assert empty.out_of_budget
    assert empty.oob_filters == ()