"""Instance - an immutable snapshot of one running machine."""
from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from tick_automaton.types import State

if TYPE_CHECKING:
    from tick_automaton.definition import Definition

StepPolicy = Mapping[State, tuple[State, ...]]


def freeze_data(data: Mapping[Any, Any] | None) -> Mapping[Any, Any]:
    """Copy ``data`` into a read-only mapping."""
    return MappingProxyType(dict(data) if data is not None else {})


def freeze_policy(policy: Mapping[State, Any] | None) -> StepPolicy | None:
    if policy is None:
        return None
    return MappingProxyType({state: tuple(order) for state, order in policy.items()})


@dataclass(frozen=True, slots=True)
class Instance:
    """Current state, data and stepping bookkeeping of a machine.

    Every update returns a new Instance; the receiver is never modified.
    The Definition is shared by reference and excluded from equality.

    Attributes:
        state: Current state.
        data: Read-only instance data.
        definition: Shared Definition, or None for an unbound instance.
        alive: Whether ``act`` may step this instance.
        step_policy: Optional per-state preferred choice order.
        pending_choice: Target of the last ``act`` step a validator rejected.
        last_completed_state: Target of the last successful ``act`` step.
    """

    state: State
    data: Mapping[Any, Any] = field(default_factory=lambda: MappingProxyType({}))
    definition: Definition | None = field(default=None, compare=False)
    alive: bool = False
    step_policy: StepPolicy | None = None
    pending_choice: State | None = None
    last_completed_state: State | None = None

    # Compared by value; data is a mapping proxy, so never hashable.
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        # Own read-only copies of caller-supplied mappings.
        object.__setattr__(self, "data", freeze_data(self.data))
        object.__setattr__(self, "step_policy", freeze_policy(self.step_policy))

    @property
    def is_alive(self) -> bool:
        return self.alive

    def get(self, key: Any, default: Any = None) -> Any:
        """Look up one data value."""
        return self.data.get(key, default)

    def set_data(self, values: Mapping[Any, Any] | None = None, /, **kwargs: Any) -> Instance:
        """Merge key/value pairs into data. Same call shape as ``dict.update``."""
        merged = dict(self.data)
        if values is not None:
            merged.update(values)
        merged.update(kwargs)
        return self.with_data(merged)

    def update_data(self, key: Any, fn: Any, *args: Any) -> Instance:
        """Replace ``data[key]`` with ``fn(data[key], *args)``.

        A missing key passes None. If ``fn`` is not callable, the instance
        is returned unchanged.
        """
        if not callable(fn):
            return self
        return self.set_data({key: fn(self.data.get(key), *args)})

    def remove_keys(self, *keys: Any) -> Instance:
        """Drop the named keys from data. Missing keys are ignored."""
        remaining = {k: v for k, v in self.data.items() if k not in keys}
        return self.with_data(remaining)

    def with_data(self, data: Mapping[Any, Any]) -> Instance:
        """Replace data wholesale."""
        return dataclasses.replace(self, data=freeze_data(data))

    def reset_state(self, state: State) -> Instance:
        """Force the current state. No validators or transforms run."""
        return dataclasses.replace(self, state=state)


def create_instance(
    definition: Definition | None,
    initial_state: State,
    data: Mapping[Any, Any] | None = None,
) -> Instance:
    """Bind a Definition and an initial state. The result is not alive."""
    return Instance(
        state=initial_state,
        data=freeze_data(data),
        definition=definition,
    )
