"""Shared type aliases, the ANY wildcard, and error types."""

from __future__ import annotations

from collections.abc import Hashable, Mapping
from enum import Enum
from typing import Any, Callable, Final

State = Hashable
Data = Mapping[Any, Any]

# Transform: data -> data, applied when a transition fires.
TransformFn = Callable[[Data], Data]
# Validator: data -> bool, consulted before a transition fires.
PredicateFn = Callable[[Data], bool]


class _AnyState:
    """Wildcard state matching every state on its side of a lookup."""

    _instance: _AnyState | None = None

    def __new__(cls) -> _AnyState:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ANY"


ANY: Final = _AnyState()

# Textual spelling accepted at construction time and normalized to ANY.
ANY_ALIASES: Final = frozenset({"any"})

RESERVED_NAMES: Final = frozenset({"state", "data", "stm", "definition"})


def normalize_state(state: State) -> State:
    """Map textual spellings of the wildcard onto the ANY sentinel."""
    if isinstance(state, str) and state in ANY_ALIASES:
        return ANY
    return state


class ActMode(Enum):
    """Policy used by ``act`` to pick the next choice."""

    SEQUENTIAL = "sequential"
    RANDOM = "random"
    FIXED = "fixed"


class AutomatonError(Exception):
    """Base class for all automaton failures."""


class ReservedNameError(AutomatonError, ValueError):
    """Raised when a reserved name (or None) is registered as a state."""

    def __init__(self, state: State) -> None:
        self.state = state
        if state is None:
            message = "None cannot be used as a state; it marks an unset choice"
        else:
            message = (
                f"{state!r} is reserved and cannot be used as a state "
                f"(reserved: {sorted(RESERVED_NAMES)})"
            )
        super().__init__(message)


class UnknownStateError(AutomatonError, KeyError):
    """Raised when a state is not declared by the definition."""

    def __init__(self, state: State, message: str | None = None) -> None:
        self.state = state
        super().__init__(message or f"Definition does not declare state {state!r}")


class NoDefinitionError(AutomatonError, ValueError):
    """Raised when an instance has no definition bound."""


class NotAliveError(AutomatonError, RuntimeError):
    """Raised when ``act`` is called on an instance that is not alive."""


class EmptyChoiceSetError(AutomatonError, LookupError):
    """Raised when ``act`` finds nothing reachable from the current state."""

    def __init__(self, state: State) -> None:
        self.state = state
        super().__init__(f"No choices reachable from state {state!r}")


class NoTransitionError(AutomatonError, LookupError):
    """Raised in strict mode when a move has no registered transition."""

    def __init__(self, from_state: State, to_state: State) -> None:
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"There is no transition from state {from_state!r} to state {to_state!r}"
        )
