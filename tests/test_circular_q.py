import pytest

from magneto.log.circular_q import CircularQueue


def test_fifo_order():
    q = CircularQueue(3)
    q.push_back("a")
    q.push_back("b")
    assert q.front() == "a"
    assert q.pop_front() == "a"
    assert q.front() == "b"
    assert q.pop_front() == "b"
    assert q.empty()


def test_overrun_drops_oldest():
    q = CircularQueue(2)
    for item in (1, 2, 3):
        q.push_back(item)
    assert q.overrun_counter() == 1
    assert list(q) == [2, 3]
    assert q.front() == 2


def test_full_after_capacity_pushes():
    q = CircularQueue(2)
    q.push_back("x")
    assert not q.full()
    q.push_back("y")
    assert q.full()
    assert len(q) == q.max_items


def test_no_overrun_below_capacity():
    q = CircularQueue(5)
    for item in range(5):
        q.push_back(item)
    assert q.overrun_counter() == 0
    assert list(q) == list(range(5))


def test_disabled_queue_ignores_pushes():
    q = CircularQueue(0)
    q.push_back("ignored")
    assert q.empty()
    assert not q.full()
    assert len(q) == 0


def test_front_of_empty_raises():
    with pytest.raises(IndexError):
        CircularQueue(2).front()


def test_pop_of_empty_raises():
    with pytest.raises(IndexError):
        CircularQueue(2).pop_front()


def test_negative_capacity_rejected():
    with pytest.raises(ValueError):
        CircularQueue(-1)