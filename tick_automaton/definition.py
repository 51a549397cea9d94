"""Definition store: the construction-time builder and the frozen Definition."""
from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from tick_automaton.config import AutomatonConfig
from tick_automaton.types import (
    ANY,
    RESERVED_NAMES,
    PredicateFn,
    ReservedNameError,
    State,
    TransformFn,
    normalize_state,
)

_EMPTY: Mapping[Any, Any] = MappingProxyType({})


@dataclass(frozen=True)
class StateEntry:
    """Outgoing transitions and validators of one state.

    A value of None marks an edge that is registered without a callable:
    identity for a transition, always-allowed for a validator.
    """

    transitions: Mapping[State, TransformFn | None]
    validators: Mapping[State, PredicateFn | None]


def _check_name(state: State) -> None:
    if state is None or (isinstance(state, str) and state in RESERVED_NAMES):
        raise ReservedNameError(state)


def _callable_or_none(fn: Any) -> Any:
    return fn if callable(fn) else None


def _triples(flat: Sequence[Any], label: str) -> list[tuple[Any, Any, Any]]:
    items = list(flat)
    if len(items) % 3:
        raise ValueError(
            f"{label} must be a flat sequence of (from, to, fn) triples, "
            f"got {len(items)} items"
        )
    return [(items[i], items[i + 1], items[i + 2]) for i in range(0, len(items), 3)]


class DefinitionBuilder:
    """Mutable registry used while a Definition is being assembled.

    Not thread-safe. Call ``build()`` to obtain a frozen Definition that
    later builder mutations never reach.
    """

    def __init__(self, config: AutomatonConfig | None = None) -> None:
        self.config: AutomatonConfig = config if config is not None else AutomatonConfig()
        # dicts used as ordered sets / ordered maps
        self._states: dict[State, None] = {}
        self._transitions: dict[State, dict[State, TransformFn | None]] = {}
        self._validators: dict[State, dict[State, PredicateFn | None]] = {}

    @classmethod
    def from_definition(cls, definition: Definition) -> DefinitionBuilder:
        """Re-open a built Definition for incremental construction."""
        builder = cls(definition.config)
        for state in definition.states:
            builder._states[state] = None
        for from_state, table in definition._transitions.items():
            builder._transitions[from_state] = dict(table)
        for from_state, table in definition._validators.items():
            builder._validators[from_state] = dict(table)
        return builder

    # --- States ---

    def add_state(self, state: State) -> DefinitionBuilder:
        """Declare a state. Re-declaring is a no-op."""
        state = normalize_state(state)
        if state is ANY:
            return self
        _check_name(state)
        self._states.setdefault(state, None)
        return self

    def remove_state(self, state: State) -> DefinitionBuilder:
        """Remove a state with every edge leaving or entering it.

        Raises ReservedNameError for a reserved name and KeyError if the
        state is not declared.
        """
        state = normalize_state(state)
        _check_name(state)
        if state not in self._states:
            raise KeyError(state)
        del self._states[state]
        self._transitions.pop(state, None)
        self._validators.pop(state, None)
        for table in (*self._transitions.values(), *self._validators.values()):
            table.pop(state, None)
        return self

    def has_state(self, state: State) -> bool:
        return normalize_state(state) in self._states

    # --- Edges ---

    def add_transition(
        self, from_state: State, to_state: State, fn: TransformFn | None = None
    ) -> DefinitionBuilder:
        """Register a transform for ``from_state -> to_state``.

        Either side may be ANY (or ``"any"``). Concrete endpoints are
        declared as states. Overwrites an existing edge in place.
        """
        from_state = normalize_state(from_state)
        to_state = normalize_state(to_state)
        self.add_state(from_state)
        self.add_state(to_state)
        self._transitions.setdefault(from_state, {})[to_state] = _callable_or_none(fn)
        return self

    def remove_transition(self, from_state: State, to_state: State) -> DefinitionBuilder:
        """Remove one transition. Raises KeyError if it is not registered."""
        from_state = normalize_state(from_state)
        to_state = normalize_state(to_state)
        table = self._transitions.get(from_state)
        if table is None or to_state not in table:
            raise KeyError((from_state, to_state))
        del table[to_state]
        return self

    def add_validator(
        self, from_state: State, to_state: State, fn: PredicateFn | None = None
    ) -> DefinitionBuilder:
        """Register a validator for ``from_state -> to_state``.

        Does not declare states; validators only gate declared transitions.
        """
        from_state = normalize_state(from_state)
        to_state = normalize_state(to_state)
        for state in (from_state, to_state):
            _check_name(state)
        self._validators.setdefault(from_state, {})[to_state] = _callable_or_none(fn)
        return self

    def remove_validator(self, from_state: State, to_state: State) -> DefinitionBuilder:
        """Remove one validator. Raises KeyError if it is not registered."""
        from_state = normalize_state(from_state)
        to_state = normalize_state(to_state)
        table = self._validators.get(from_state)
        if table is None or to_state not in table:
            raise KeyError((from_state, to_state))
        del table[to_state]
        return self

    # --- Output ---

    def build(self) -> Definition:
        """Freeze the current registry into a Definition."""
        return Definition(
            states=tuple(self._states),
            transitions=_freeze(self._transitions),
            validators=_freeze(self._validators),
            config=self.config,
        )


def _freeze(tables: dict[State, dict[State, Any]]) -> Mapping[State, Mapping[State, Any]]:
    return MappingProxyType(
        {key: MappingProxyType(dict(table)) for key, table in tables.items()}
    )


class Definition:
    """Read-only, shareable state machine definition.

    Instances hold a reference to a Definition; nothing in the runtime
    mutates it after ``build``.
    """

    __slots__ = ("_states", "_state_set", "_transitions", "_validators", "_config")

    def __init__(
        self,
        states: tuple[State, ...],
        transitions: Mapping[State, Mapping[State, TransformFn | None]],
        validators: Mapping[State, Mapping[State, PredicateFn | None]],
        config: AutomatonConfig,
    ) -> None:
        self._states = states
        self._state_set = frozenset(states)
        self._transitions = transitions
        self._validators = validators
        self._config = config

    @property
    def states(self) -> tuple[State, ...]:
        """Declared states in declaration order. Never contains ANY."""
        return self._states

    @property
    def config(self) -> AutomatonConfig:
        return self._config

    def has_state(self, state: State) -> bool:
        return state in self._state_set

    def __contains__(self, state: object) -> bool:
        return state in self._state_set

    def __iter__(self) -> Iterator[State]:
        return iter(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def __repr__(self) -> str:
        return f"Definition(states={list(self._states)!r})"

    def transitions(self, state: State) -> Mapping[State, TransformFn | None]:
        """Outgoing transition table of ``state`` (ANY allowed), in order."""
        return self._transitions.get(state, _EMPTY)

    def validators(self, state: State) -> Mapping[State, PredicateFn | None]:
        """Outgoing validator table of ``state`` (ANY allowed)."""
        return self._validators.get(state, _EMPTY)

    def entry(self, state: State) -> StateEntry:
        return StateEntry(
            transitions=self.transitions(state),
            validators=self.validators(state),
        )

    def has_transition(self, from_state: State, to_state: State) -> bool:
        return to_state in self.transitions(from_state)

    def transition(self, from_state: State, to_state: State) -> TransformFn | None:
        """Registered transform for the edge, or None."""
        return self.transitions(from_state).get(to_state)

    def validator(self, from_state: State, to_state: State) -> PredicateFn | None:
        """Registered validator for the edge, or None."""
        return self.validators(from_state).get(to_state)


def build(
    transitions: Iterable[Any],
    validators: Iterable[Any] | None = (),
    *,
    config: AutomatonConfig | None = None,
) -> Definition:
    """Build a Definition from flat ``from, to, fn, from, to, fn, ...`` lists.

    The declared states are the endpoints of ``transitions`` (ANY and its
    spelling ``"any"`` are addressed but never declared). States are
    registered first, then every transition, then every validator.
    ``validators`` may be None when there are none.
    Raises ReservedNameError if an endpoint is a reserved name.
    """
    transition_triples = _triples(list(transitions), "transitions")
    validator_triples = _triples(list(validators or ()), "validators")

    builder = DefinitionBuilder(config)
    for from_state, to_state, _fn in transition_triples:
        builder.add_state(from_state)
        builder.add_state(to_state)
    for from_state, to_state, fn in transition_triples:
        builder.add_transition(from_state, to_state, fn)
    for from_state, to_state, fn in validator_triples:
        builder.add_validator(from_state, to_state, fn)
    return builder.build()
