"""
Tests for creation-order allocation and the name-keyed container.
"""

import copy
import threading
from decimal import Decimal

import pytest

from asap2 import NodeDict, SequenceAllocator, build_context, current_allocator
from asap2.a2l_model import BitMask, CoeffsLinear, Measurement, Module, SystemConstant


def test_allocator_counts_up()->None:
    allocator = SequenceAllocator()
    assert allocator.last == 0
    first = allocator.allocate()
    assert [allocator.allocate() for _ in range(2)] == [first + 1, first + 2]
    assert allocator.last == first + 2


def test_allocators_never_reuse_numbers()->None:
    first = SequenceAllocator()
    second = SequenceAllocator()
    a = first.allocate()
    b = second.allocate()
    c = first.allocate()
    assert a < b < c


def test_allocator_fails_instead_of_wrapping()->None:
    floor = SequenceAllocator().allocate()
    allocator = SequenceAllocator(limit=floor + 1)
    assert allocator.allocate() == floor + 1
    with pytest.raises(OverflowError):
        allocator.allocate()
    assert allocator.last == floor + 1


def test_allocator_is_thread_safe()->None:
    allocator = SequenceAllocator()
    results: list[int] = []
    lock = threading.Lock()

    def worker() -> None:
        ids = [allocator.allocate() for _ in range(1000)]
        with lock:
            results.extend(ids)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(set(results)) == 4000
    assert allocator.last == max(results)


def test_build_context_scopes_allocation()->None:
    default = current_allocator()
    before = SequenceAllocator().allocate()
    with build_context() as allocator:
        assert current_allocator() is allocator
        first = BitMask(1)
        second = BitMask(2)
        assert before < first.order_id
        assert second.order_id == first.order_id + 1
        assert allocator.last == second.order_id
    assert current_allocator() is default


def test_build_context_accepts_existing_allocator()->None:
    start = SequenceAllocator().allocate() + 100
    allocator = SequenceAllocator(start=start)
    with build_context(allocator):
        assert BitMask(1).order_id == start + 1


def test_order_id_is_not_part_of_equality()->None:
    a = BitMask(0xFF)
    b = BitMask(0xFF)
    assert a.order_id != b.order_id
    assert a == b
    assert a != BitMask(0xF0)


def test_numbers_are_stored_as_decimal()->None:
    coeffs = CoeffsLinear(1, 0.5)
    assert coeffs.a == Decimal(1)
    assert coeffs.b == Decimal("0.5")
    assert isinstance(coeffs.b, Decimal)


def test_node_dict_iterates_in_creation_order()->None:
    with build_context():
        a = SystemConstant("a", "1")
        b = SystemConstant("b", "2")
        c = SystemConstant("c", "3")

    constants = NodeDict()
    for node in (c, a, b):
        constants.add(node)

    assert list(constants) == ["a", "b", "c"]
    assert list(constants.values()) == [a, b, c]
    assert constants["b"] is b
    assert "c" in constants
    assert len(constants) == 3


def test_node_dict_rejects_duplicates()->None:
    constants = NodeDict([SystemConstant("k", "1")])
    with pytest.raises(ValueError, match="duplicate key 'k'"):
        constants.add(SystemConstant("k", "2"))
    assert constants["k"].value == "1"


def test_node_dict_needs_keyed_nodes()->None:
    with pytest.raises(ValueError, match="no key field"):
        NodeDict().add(BitMask(1))


def test_node_dict_removal()->None:
    constants = NodeDict([SystemConstant("x", "1"), SystemConstant("y", "2")])
    del constants["x"]
    assert list(constants) == ["y"]


def test_node_dict_equality_follows_order()->None:
    with build_context():
        a1, b1 = SystemConstant("a", "1"), SystemConstant("b", "2")
        a2, b2 = SystemConstant("a", "1"), SystemConstant("b", "2")
        b3, a3 = SystemConstant("b", "2"), SystemConstant("a", "1")

    assert NodeDict([b2, a2]) == NodeDict([a1, b1])
    assert list(NodeDict([a3, b3])) == ["b", "a"]
    assert NodeDict([a1, b1]) != NodeDict([a3, b3])
    assert NodeDict([a1]) != NodeDict([a1, b1])


def test_modules_differing_in_order_are_unequal()->None:
    def measurement(name: str) -> Measurement:
        return Measurement(name, "", "UBYTE", "NO_COMPU_METHOD", 0, 0, 0, 1)

    with build_context():
        first = Module("M", "", measurements=NodeDict([measurement("A"), measurement("B")]))
        b, a = measurement("B"), measurement("A")
        second = Module("M", "", measurements=NodeDict([a, b]))
    assert list(second.measurements) == ["B", "A"]
    assert first != second


def test_node_dict_setitem_checks_key()->None:
    constants = NodeDict()
    with pytest.raises(ValueError, match="cannot be stored as 'y'"):
        constants["y"] = SystemConstant("x", "1")
    replacement = SystemConstant("x", "2")
    constants["x"] = SystemConstant("x", "1")
    constants["x"] = replacement
    assert constants["x"] is replacement
    assert len(constants) == 1


def test_key_is_fixed_while_stored()->None:
    constant = SystemConstant("k", "1")
    constants = NodeDict([constant])
    with pytest.raises(AttributeError, match="while it is stored in a NodeDict"):
        constant.name = "other"
    constant.value = "2"
    constant.name = "k"
    assert list(constants) == ["k"]

    del constants["k"]
    constant.name = "other"
    assert constant.key == "other"


def test_copy_gets_new_order_id()->None:
    original = SystemConstant("k", "1")
    NodeDict([original])
    clone = copy.copy(original)
    assert clone == original
    assert clone.order_id > original.order_id
    clone.name = "renamed"
    assert original.name == "k"


def test_deep_copy_keeps_dictionary_order()->None:
    with build_context():
        late = SystemConstant("late", "1")
        early = SystemConstant("early", "2")
    constants = NodeDict([early, late])
    assert list(constants) == ["late", "early"]

    clone = copy.deepcopy(constants)
    assert clone == constants
    assert list(clone) == ["late", "early"]
    assert clone["late"] is not late
    assert clone["late"].order_id > early.order_id
    clone["late"].value = "changed"
    assert late.value == "1"
