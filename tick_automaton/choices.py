"""Choice resolution: which states an instance may step to next."""
from __future__ import annotations

from tick_automaton.instance import Instance
from tick_automaton.transitions import require_definition
from tick_automaton.types import ANY, State


def get_reachable_states(instance: Instance) -> list[State]:
    """Direct transition targets of the current state, in declaration order."""
    definition = require_definition(instance)
    return [s for s in definition.transitions(instance.state) if s is not ANY]


def get_choices(instance: Instance, state: State | None = None) -> list[State]:
    """Ordered, de-duplicated choices from ``state`` (default: current state).

    Direct targets come first, followed by targets reachable through
    ``ANY -> target`` that are not already present. If the instance's
    step policy has an entry for the state, that preference list is
    returned instead, filtered to members of the same union.
    """
    definition = require_definition(instance)
    if state is None:
        state = instance.state

    choices: list[State] = []
    seen: set[State] = set()
    for source in (state, ANY):
        for target in definition.transitions(source):
            if target is ANY or target in seen:
                continue
            seen.add(target)
            choices.append(target)

    policy = instance.step_policy
    if policy is not None and state in policy:
        preferred: list[State] = []
        for target in policy[state]:
            if target in seen and target not in preferred:
                preferred.append(target)
        return preferred
    return choices
