import pytest

from iotbridge.fifo import Fifo


def test_order_is_first_in_first_out():
    q = Fifo(5)
    for v in ("a", "b", "c"):
        q.enqueue(v)
    assert [q.dequeue(), q.dequeue(), q.dequeue()] == ["a", "b", "c"]


def test_oldest_is_truncated():
    q = Fifo(2)
    for v in (1, 2, 3):
        q.enqueue(v)
    assert len(q) == 2
    assert q.dequeue() == 2
    assert q.dequeue() == 3


def test_empty_dequeue_raises():
    q = Fifo(3)
    with pytest.raises(IndexError):
        q.dequeue()


@pytest.mark.parametrize("max_length", [0, -4])
def test_non_positive_length_stores_nothing(max_length):
    q = Fifo(max_length)
    q.enqueue("x")
    assert len(q) == 0
    with pytest.raises(IndexError):
        q.dequeue()


def test_len_never_exceeds_max():
    q = Fifo(3)
    for i in range(10):
        q.enqueue(i)
        assert len(q) <= 3