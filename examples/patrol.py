"""Patrol -- autonomous stepping with act().

Demonstrates:
- give_life with a per-state preference order
- Sequential, fixed and seeded random stepping
- A rejected step becoming pending and retried later

Run: python -m examples.patrol
"""

import random

from tick_automaton import ANY, ActMode, act, build, create_instance, give_life


def main() -> None:
    print("=== Patrol ===\n")

    guard = build(
        [
            "gate", "tower", None,
            "tower", "yard", None,
            "yard", "gate", None,
            ANY, "barracks", lambda d: {**d, "rested": True},
            "barracks", "gate", None,
        ],
        # Nobody leaves the barracks before the shift starts.
        ["barracks", "gate", lambda d: d.get("shift", False)],
    )

    inst = give_life(create_instance(guard, "gate"), {"yard": ["barracks"]})
    for _ in range(6):
        inst = act(inst, ActMode.SEQUENTIAL)
        pending = f"  (pending {inst.pending_choice})" if inst.pending_choice else ""
        print(f"  sequential -> {inst.state}{pending}")

    inst = act(inst.set_data(shift=True), ActMode.FIXED)
    print(f"  shift starts, fixed -> {inst.state}\n")

    rng = random.Random(7)
    for _ in range(5):
        inst = act(inst, ActMode.RANDOM, rng=rng)
        print(f"  random -> {inst.state}")


if __name__ == "__main__":
    main()
