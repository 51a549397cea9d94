"""Tests for give_life, kill and act."""
from __future__ import annotations

import dataclasses
import random

import pytest
from tick_automaton import (
    ANY,
    ActMode,
    AutomatonConfig,
    EmptyChoiceSetError,
    NotAliveError,
    UnknownStateError,
    act,
    build,
    create_instance,
    get_choices,
    give_life,
    kill,
)


def ring(config=None):
    """Every state reachable from every other state through ANY."""
    return build([ANY, "a", None, ANY, "b", None, ANY, "c", None], config=config)


class TestGiveLifeAndKill:
    def test_give_life(self) -> None:
        inst = give_life(create_instance(ring(), "a"))
        assert inst.alive is True
        assert inst.step_policy is None
        assert inst.pending_choice is None
        assert inst.last_completed_state is None

    def test_give_life_installs_policy(self) -> None:
        inst = give_life(create_instance(ring(), "a"), {"a": ["c", "b"]})
        assert dict(inst.step_policy) == {"a": ("c", "b")}

    def test_give_life_clears_bookkeeping(self) -> None:
        defn = build(["a", "b", None], ["a", "b", lambda d: False])
        inst = act(give_life(create_instance(defn, "a")))
        assert inst.pending_choice == "b"
        revived = give_life(inst)
        assert revived.pending_choice is None
        assert revived.last_completed_state is None

    def test_give_life_undeclared_state_raises(self) -> None:
        with pytest.raises(UnknownStateError):
            give_life(create_instance(ring(), "zzz"))

    def test_kill(self) -> None:
        inst = kill(give_life(create_instance(ring(), "a")))
        assert inst.alive is False

    def test_original_untouched(self) -> None:
        inst = create_instance(ring(), "a")
        give_life(inst)
        assert inst.alive is False


class TestActErrors:
    def test_never_alive_raises(self) -> None:
        with pytest.raises(NotAliveError):
            act(create_instance(ring(), "a"))

    def test_killed_raises(self) -> None:
        inst = kill(give_life(create_instance(ring(), "a")))
        with pytest.raises(NotAliveError):
            act(inst, ActMode.SEQUENTIAL)

    def test_empty_choices_raises(self) -> None:
        defn = build(["a", "b", None])
        inst = give_life(create_instance(defn, "b"))
        for mode in ActMode:
            with pytest.raises(EmptyChoiceSetError) as exc_info:
                act(inst, mode)
            assert exc_info.value.state == "b"

    def test_unknown_mode_raises(self) -> None:
        inst = give_life(create_instance(ring(), "a"))
        with pytest.raises(ValueError):
            act(inst, "clockwise")


class TestSequential:
    def test_starts_at_first_choice(self) -> None:
        inst = act(give_life(create_instance(ring(), "b")), ActMode.SEQUENTIAL)
        assert inst.state == "a"
        assert inst.last_completed_state == "a"

    def test_cycles_and_wraps(self) -> None:
        inst = give_life(create_instance(ring(), "a"))
        visited = []
        for _ in range(7):
            inst = act(inst, ActMode.SEQUENTIAL)
            visited.append(inst.state)
        assert visited == ["a", "b", "c", "a", "b", "c", "a"]

    def test_string_mode(self) -> None:
        inst = act(give_life(create_instance(ring(), "a")), "sequential")
        assert inst.state == "a"

    def test_unmatched_reference_restarts(self) -> None:
        defn = build(["x", "y", None, "x", "z", None, "y", "x", None, "z", "x", None])
        inst = give_life(create_instance(defn, "x"))
        inst = act(inst)  # x -> y
        inst = act(inst)  # y -> x
        inst = act(inst)  # last completed "x" is not among x's choices -> y
        assert inst.state == "y"

    def test_advances_past_pending(self) -> None:
        defn = build(
            ["s", "a", None, "s", "b", None],
            ["s", "a", lambda d: False],
        )
        inst = act(give_life(create_instance(defn, "s")), ActMode.SEQUENTIAL)
        assert inst.state == "s"
        assert inst.pending_choice == "a"
        inst = act(inst, ActMode.SEQUENTIAL)
        assert inst.state == "b"
        assert inst.pending_choice is None

    def test_follows_policy_order(self) -> None:
        inst = give_life(create_instance(ring(), "a"), {"a": ["c", "b"]})
        inst = act(inst)
        assert inst.state == "c"

    def test_default_mode_from_config(self) -> None:
        defn = build(
            ["a", "b", None, "a", "c", None],
            config=AutomatonConfig(default_mode=ActMode.FIXED),
        )
        inst = give_life(create_instance(defn, "a"))
        assert act(inst).state == "b"


class TestFixed:
    def test_first_choice_without_pending(self) -> None:
        defn = build(["a", "b", None, "a", "c", None, "b", "a", None, "c", "a", None])
        inst = give_life(create_instance(defn, "a"))
        for _ in range(3):
            inst = act(inst, ActMode.FIXED)
            assert inst.state == "b"
            inst = act(inst, ActMode.FIXED)
            assert inst.state == "a"

    def test_retries_pending_until_valid(self) -> None:
        defn = build(
            ["a", "b", None, "a", "c", None, "a", "d", None],
            ["a", "b", lambda d: False, "a", "c", lambda d: d.get("open", False)],
        )
        inst = give_life(create_instance(defn, "a"), {"a": ["c", "b", "d"]})
        inst = act(inst, ActMode.FIXED)
        assert inst.state == "a"
        assert inst.pending_choice == "c"
        for _ in range(3):
            inst = act(inst, ActMode.FIXED)
            assert inst.state == "a"
            assert inst.pending_choice == "c"
        inst = act(inst.set_data(open=True), ActMode.FIXED)
        assert inst.state == "c"
        assert inst.pending_choice is None
        assert inst.last_completed_state == "c"

    def test_pending_not_in_choices_falls_back(self) -> None:
        defn = build(["a", "b", None, "a", "c", None])
        inst = give_life(create_instance(defn, "a"))
        inst = dataclasses.replace(inst, pending_choice="zzz")
        assert act(inst, ActMode.FIXED).state == "b"


class TestRandom:
    def test_seeded_choice_is_reproducible(self) -> None:
        inst = give_life(create_instance(ring(), "a"))
        run_a = []
        run_b = []
        for run, seed in ((run_a, 7), (run_b, 7)):
            rng = random.Random(seed)
            current = inst
            for _ in range(20):
                current = act(current, ActMode.RANDOM, rng=rng)
                run.append(current.state)
        assert run_a == run_b

    def test_picks_only_choices(self) -> None:
        rng = random.Random(42)
        inst = give_life(create_instance(ring(), "a"))
        seen = set()
        for _ in range(60):
            inst = act(inst, ActMode.RANDOM, rng=rng)
            seen.add(inst.state)
        assert seen == {"a", "b", "c"}

    def test_random_rejected_sets_pending(self) -> None:
        defn = build(["a", "b", None], ["a", "b", lambda d: False])
        inst = act(give_life(create_instance(defn, "a")), ActMode.RANDOM, rng=random.Random(1))
        assert inst.state == "a"
        assert inst.pending_choice == "b"


class TestBookkeeping:
    def test_success_clears_pending(self) -> None:
        defn = build(["a", "b", None], ["a", "b", lambda d: d.get("go", False)])
        inst = act(give_life(create_instance(defn, "a")))
        assert inst.pending_choice == "b"
        inst = act(inst.set_data(go=True))
        assert inst.state == "b"
        assert inst.pending_choice is None
        assert inst.last_completed_state == "b"

    def test_rejection_keeps_last_completed(self) -> None:
        defn = build(
            ["a", "b", None, "b", "c", None],
            ["b", "c", lambda d: False],
        )
        inst = act(give_life(create_instance(defn, "a")))
        inst = act(inst)
        assert inst.state == "b"
        assert inst.last_completed_state == "b"
        assert inst.pending_choice == "c"

    def test_rejected_self_loop_is_pending(self) -> None:
        defn = build(["a", "a", None], ["a", "a", lambda d: False])
        inst = act(give_life(create_instance(defn, "a")))
        assert inst.state == "a"
        assert inst.pending_choice == "a"
        assert inst.last_completed_state is None

    def test_transforms_run_during_act(self) -> None:
        defn = build(["a", "b", lambda d: {**d, "hops": d.get("hops", 0) + 1}])
        inst = act(give_life(create_instance(defn, "a")))
        assert inst.get("hops") == 1

    def test_act_returns_new_instance(self) -> None:
        inst = give_life(create_instance(ring(), "a"))
        stepped = act(inst)
        assert inst.last_completed_state is None
        assert stepped is not inst

    def test_choices_follow_state(self) -> None:
        inst = give_life(create_instance(ring(), "a"))
        assert get_choices(act(inst)) == ["a", "b", "c"]
