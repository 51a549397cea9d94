"""Basics -- building a definition and moving an instance by hand.

Demonstrates:
- Building a definition from flat (from, to, fn) triples
- Exit and entry hooks registered through ANY
- A validator that rejects a move without raising

Run: python -m examples.basics
"""

from tick_automaton import ANY, build, create_instance, move


def log(tag):
    def fn(data):
        return {**data, "log": [*data.get("log", []), tag]}

    return fn


def main() -> None:
    print("=== Basics ===\n")

    door = build(
        [
            "closed", "open", log("opening"),
            "open", "closed", log("closing"),
            "closed", "locked", log("locking"),
            "locked", "closed", log("unlocking"),
            "open", ANY, log("leaving open"),
            ANY, "locked", log("entered locked"),
        ],
        # A locked door only unlocks with the key.
        ["locked", "closed", lambda d: d.get("has_key", False)],
    )

    inst = create_instance(door, "closed", {"log": []})
    for target in ("open", "closed", "locked", "closed"):
        before = inst.state
        inst = move(inst, target)
        outcome = "ok" if inst.state == target else "rejected"
        print(f"  {before:>7} -> {target:<7} {outcome}")

    inst = move(inst.set_data(has_key=True), "closed")
    print(f"\n  with key: now {inst.state}")
    print(f"  log: {inst.get('log')}")


if __name__ == "__main__":
    main()
