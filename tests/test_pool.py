from dataclasses import dataclass

from iotbridge.pool import Pool


@dataclass
class Item:
    name: str
    stopped: bool = False

    def shutdown(self):
        self.stopped = True


def test_add_and_get_by_name():
    pool = Pool()
    a = Item("a")
    pool.add(a)
    assert pool.get_by_name("a") is a
    assert pool.get_by_name("missing") is None


def test_add_same_name_replaces():
    pool = Pool()
    first, second = Item("x"), Item("x")
    pool.add(first)
    pool.add(second)
    assert pool.get_by_name("x") is second
    assert len(pool.get_all()) == 1


def test_remove():
    pool = Pool()
    a = Item("a")
    pool.add(a)
    pool.remove(a)
    assert pool.get_by_name("a") is None


def test_get_all_returns_copy():
    pool = Pool()
    pool.add(Item("a"))
    snapshot = pool.get_all()
    snapshot.clear()
    assert list(pool.get_all()) == ["a"]


def test_get_by_names_keeps_order_and_skips_missing():
    pool = Pool()
    a, b = Item("a"), Item("b")
    pool.add(a)
    pool.add(b)
    assert pool.get_by_names(["b", "nope", "a"]) == [b, a]


def test_shutdown_reaches_every_item():
    pool = Pool()
    items = [Item("a"), Item("b"), Item("c")]
    for i in items:
        pool.add(i)
    pool.shutdown()
    assert all(i.stopped for i in items)