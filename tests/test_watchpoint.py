import pytest

from npcdbg.watchpoint import Watchpoint, WatchpointPool


@pytest.fixture
def values():
    return {"x": 1, "y": 2, "z": 3}


@pytest.fixture
def pool(values):
    return WatchpointPool(lambda e: values[e])


def test_add_records_current_value(pool, values):
    wp = pool.add("x")
    assert wp == Watchpoint(0, "x", values["x"])


def test_check_without_change(pool):
    pool.add("x")
    assert pool.check() == []


def test_check_reports_change_and_updates(pool, values):
    wp = pool.add("y")
    values["y"] = 7
    changed = pool.check()
    assert changed == [(wp, 2)]
    assert wp.value == 7
    assert pool.check() == []


def test_capacity_is_one_less_than_size(values):
    small = WatchpointPool(lambda e: values[e], size=3)
    small.add("x")
    small.add("y")
    with pytest.raises(RuntimeError):
        small.add("z")


def test_remove_renumbers(pool):
    pool.add("x")
    pool.add("y")
    pool.add("z")
    removed = pool.remove(0)
    assert removed.expression == "x"
    assert [(wp.number, wp.expression) for wp in pool] == [(0, "y"), (1, "z")]


def test_remove_out_of_range(pool):
    pool.add("x")
    with pytest.raises(IndexError):
        pool.remove(1)


def test_failed_evaluation_adds_nothing(pool):
    with pytest.raises(KeyError):
        pool.add("missing")
    assert list(pool) == []


def test_format(pool):
    assert pool.format() == "There is no wp"
    pool.add("x")
    pool.add("z")
    assert pool.format() == "0 x 1\n1 z 3"