"""Transition engine: validate and execute a single move."""
from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from tick_automaton.instance import Instance, freeze_data
from tick_automaton.types import (
    ANY,
    NoDefinitionError,
    NoTransitionError,
    State,
    TransformFn,
    UnknownStateError,
)

if TYPE_CHECKING:
    from tick_automaton.definition import Definition

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MoveResult:
    """Outcome of ``try_move``: the resulting instance and whether it moved."""

    instance: Instance
    accepted: bool


def require_definition(instance: Instance) -> Definition:
    definition = instance.definition
    if definition is None:
        raise NoDefinitionError(
            f"There is no definition bound to this instance (state={instance.state!r})"
        )
    return definition


def is_valid_transition(instance: Instance, from_state: State, to_state: State) -> bool:
    """Evaluate the ``from_state -> to_state`` validator against instance data.

    No validator, or one registered without a callable, means the
    transition is allowed.
    """
    definition = require_definition(instance)
    validator = definition.validator(from_state, to_state)
    if validator is None:
        return True
    return bool(validator(instance.data))


def _apply(
    fn: TransformFn | None, data: Mapping[Any, Any], from_state: State, to_state: State
) -> Mapping[Any, Any]:
    if fn is None:
        return data
    result = fn(dict(data))
    if not isinstance(result, Mapping):
        raise TypeError(
            f"Transition {from_state!r} -> {to_state!r} returned "
            f"{type(result).__name__}, expected a mapping"
        )
    return result


def try_move(instance: Instance, to_state: State) -> MoveResult:
    """Attempt a move and report whether the validator allowed it.

    Functions run in order: exit hook ``current -> ANY``, direct
    transform ``current -> to_state``, then (with state already set)
    entry hook ``ANY -> to_state``. Each receives the previous output.
    """
    definition = require_definition(instance)
    if to_state not in definition:
        raise UnknownStateError(to_state)

    from_state = instance.state
    if definition.config.strict_transitions and not (
        definition.has_transition(from_state, to_state)
        or definition.has_transition(ANY, to_state)
    ):
        raise NoTransitionError(from_state, to_state)

    if not is_valid_transition(instance, from_state, to_state):
        logger.debug("Transition %r -> %r rejected by validator", from_state, to_state)
        return MoveResult(instance, False)

    data = instance.data
    data = _apply(definition.transition(from_state, ANY), data, from_state, ANY)
    data = _apply(definition.transition(from_state, to_state), data, from_state, to_state)
    data = _apply(definition.transition(ANY, to_state), data, ANY, to_state)

    logger.debug("Transition %r -> %r accepted", from_state, to_state)
    moved = dataclasses.replace(instance, state=to_state, data=freeze_data(data))
    return MoveResult(moved, True)


def move(instance: Instance, to_state: State) -> Instance:
    """Move to ``to_state`` if allowed.

    A validator rejection is not an error: the instance comes back
    unchanged. Raises UnknownStateError for an undeclared target and
    NoDefinitionError for an unbound instance.
    """
    return try_move(instance, to_state).instance
