"""Tests for InstanceRef and is_shared."""
from __future__ import annotations

import threading

import pytest
from tick_automaton import (
    ANY,
    InstanceRef,
    NotAliveError,
    act,
    build,
    create_instance,
    give_life,
    is_shared,
)


def counter_defn():
    return build([ANY, "tick", lambda d: {**d, "n": d.get("n", 0) + 1}])


class TestInstanceRef:
    def test_get(self) -> None:
        inst = create_instance(counter_defn(), "tick")
        assert InstanceRef(inst).get() is inst

    def test_swap_stores_result(self) -> None:
        ref = InstanceRef(create_instance(counter_defn(), "tick"))
        result = ref.swap(lambda i, k, v: i.set_data({k: v}), "x", 1)
        assert ref.get() is result
        assert result.get("x") == 1

    def test_swap_with_act(self) -> None:
        ref = InstanceRef(give_life(create_instance(counter_defn(), "tick")))
        ref.swap(act)
        ref.swap(act, "fixed")
        assert ref.get().get("n") == 2

    def test_swap_error_leaves_value(self) -> None:
        inst = create_instance(counter_defn(), "tick")
        ref = InstanceRef(inst)
        with pytest.raises(NotAliveError):
            ref.swap(act)
        assert ref.get() is inst

    def test_swap_must_return_instance(self) -> None:
        inst = create_instance(counter_defn(), "tick")
        ref = InstanceRef(inst)
        with pytest.raises(TypeError):
            ref.swap(lambda i: None)
        assert ref.get() is inst

    def test_reset(self) -> None:
        ref = InstanceRef(create_instance(counter_defn(), "tick"))
        other = create_instance(counter_defn(), "tick", {"n": 9})
        ref.reset(other)
        assert ref.get() is other

    def test_compare_and_set(self) -> None:
        inst = create_instance(counter_defn(), "tick")
        ref = InstanceRef(inst)
        updated = inst.set_data(n=1)
        assert ref.compare_and_set(inst, updated) is True
        assert ref.compare_and_set(inst, inst.set_data(n=5)) is False
        assert ref.get() is updated

    def test_concurrent_swaps_lose_nothing(self) -> None:
        ref = InstanceRef(give_life(create_instance(counter_defn(), "tick")))

        def worker() -> None:
            for _ in range(200):
                ref.swap(act)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert ref.get().get("n") == 800


class TestIsShared:
    def test_ref_is_shared(self) -> None:
        assert is_shared(InstanceRef(create_instance(None, "a"))) is True

    def test_instance_is_not_shared(self) -> None:
        assert is_shared(create_instance(None, "a")) is False
