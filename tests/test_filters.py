import math

from pdslib.filters import (
    FilterStatus,
    PureDPBudgetFilter,
    PureDPBudgetReleaseFilter,
)


def test_pure_dp_budget_filter():
    f = PureDPBudgetFilter(1.0)
    assert f.try_consume(0.5) is FilterStatus.CONTINUE
    assert f.try_consume(0.6) is FilterStatus.OUT_OF_BUDGET


def test_pure_dp_infinite_capacity():
    f = PureDPBudgetFilter(None)
    assert f.try_consume(100.0) is FilterStatus.CONTINUE
    assert f.remaining_budget() == math.inf


def test_pure_dp_can_consume_does_not_spend():
    f = PureDPBudgetFilter(1.0)
    assert f.can_consume(1.0) is FilterStatus.CONTINUE
    assert f.consumed == 0.0
    assert f.try_consume(1.0) is FilterStatus.CONTINUE
    assert f.can_consume(0.1) is FilterStatus.OUT_OF_BUDGET


def test_pure_dp_failed_consume_leaves_state():
    f = PureDPBudgetFilter(1.0)
    f.try_consume(0.5)
    assert f.try_consume(0.6) is FilterStatus.OUT_OF_BUDGET
    assert f.consumed == 0.5
    assert f.remaining_budget() == 0.5


def test_pure_dp_infinite_request_on_finite_filter():
    f = PureDPBudgetFilter(1.0)
    assert f.try_consume(math.inf) is FilterStatus.OUT_OF_BUDGET


def test_release_filter():
    f = PureDPBudgetReleaseFilter(1.0)
    assert f.try_consume(0.5) is FilterStatus.OUT_OF_BUDGET

    f.release(0.7)
    assert f.try_consume(0.5) is FilterStatus.CONTINUE
    assert f.try_consume(0.3) is FilterStatus.OUT_OF_BUDGET

    f.release(2.0)
    assert f.try_consume(0.6) is FilterStatus.OUT_OF_BUDGET
    assert f.try_consume(0.3) is FilterStatus.CONTINUE


def test_release_is_capped_by_capacity():
    f = PureDPBudgetReleaseFilter(1.0)
    f.release(5.0)
    assert f.unlocked == 1.0
    f.release(5.0)
    assert f.unlocked == 1.0


def test_release_filter_infinite_capacity():
    f = PureDPBudgetReleaseFilter(math.inf)
    assert f.try_consume(math.inf) is FilterStatus.CONTINUE
    f.release(3.0)
    f.release(4.0)
    assert f.unlocked == 7.0


def test_release_filter_rejects_infinite_request():
    f = PureDPBudgetReleaseFilter(1.0)
    f.release(1.0)
    assert f.can_consume(math.inf) is FilterStatus.OUT_OF_BUDGET


def test_release_filter_remaining_budget_ignores_unlocked():
    f = PureDPBudgetReleaseFilter(1.0)
    assert f.remaining_budget() == 1.0
    f.release(1.0)
    f.try_consume(1.0)
    assert f.remaining_budget() == 0.0


def test_release_filter_capacity_is_writable():
    f = PureDPBudgetReleaseFilter(1.0)
    f.capacity = math.inf
    assert f.try_consume(10.0) is FilterStatus.CONTINUE