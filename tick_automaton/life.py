"""Autonomous stepping: give an instance life and let it act."""
from __future__ import annotations

import dataclasses
import logging
import random as _random
from collections.abc import Mapping, Sequence
from typing import Any

from tick_automaton.choices import get_choices
from tick_automaton.instance import Instance, freeze_policy
from tick_automaton.transitions import require_definition, try_move
from tick_automaton.types import (
    ActMode,
    EmptyChoiceSetError,
    NotAliveError,
    State,
    UnknownStateError,
)

logger = logging.getLogger(__name__)


def give_life(
    instance: Instance, step_policy: Mapping[State, Sequence[State]] | None = None
) -> Instance:
    """Make the instance eligible for ``act``.

    ``step_policy`` maps a state to its preferred choice order, e.g.
    ``{"idle": ["walk", "run"]}``: from ``idle`` try ``walk`` first, then
    ``run``. States without an entry use the definition's natural order.
    Raises UnknownStateError if the current state is not declared.
    """
    definition = require_definition(instance)
    if instance.state not in definition:
        raise UnknownStateError(
            instance.state,
            f"Cannot give life to an instance in undeclared state {instance.state!r}",
        )
    return dataclasses.replace(
        instance,
        alive=True,
        step_policy=freeze_policy(step_policy),
        pending_choice=None,
        last_completed_state=None,
    )


def kill(instance: Instance) -> Instance:
    """Stop autonomous stepping. ``act`` raises NotAliveError afterwards."""
    return dataclasses.replace(instance, alive=False)


def _index_of(choices: list[State], value: State | None) -> int:
    if value is None:
        return -1
    try:
        return choices.index(value)
    except ValueError:
        return -1


def _select(instance: Instance, choices: list[State], mode: ActMode, rng: Any) -> int:
    if mode is ActMode.SEQUENTIAL:
        reference = (
            instance.pending_choice
            if instance.pending_choice is not None
            else instance.last_completed_state
        )
        return (_index_of(choices, reference) + 1) % len(choices)
    if mode is ActMode.RANDOM:
        return rng.randrange(len(choices))
    # FIXED: retry the pending target, otherwise the first choice.
    return max(_index_of(choices, instance.pending_choice), 0)


def act(
    instance: Instance,
    mode: ActMode | str | None = None,
    *,
    rng: _random.Random | None = None,
) -> Instance:
    """Take one autonomous step.

    Picks a target from ``get_choices`` according to ``mode`` and moves
    there. On success the pending choice is cleared and the target is
    recorded as the last completed state. When a validator rejects the
    move, the target becomes the pending choice and the state is
    unchanged, so a later ``act`` can retry it.

    Raises NotAliveError, NoDefinitionError or EmptyChoiceSetError.
    """
    if not instance.alive:
        raise NotAliveError(
            f"Instance in state {instance.state!r} is not alive; call give_life first"
        )
    definition = require_definition(instance)
    if mode is None:
        mode = definition.config.default_mode
    mode = ActMode(mode)

    choices = get_choices(instance)
    if not choices:
        raise EmptyChoiceSetError(instance.state)

    target = choices[_select(instance, choices, mode, rng if rng is not None else _random)]
    result = try_move(instance, target)
    if result.accepted:
        logger.debug("act(%s): %r -> %r", mode.value, instance.state, target)
        return dataclasses.replace(
            result.instance, pending_choice=None, last_completed_state=target
        )
    logger.debug("act(%s): %r -> %r pending", mode.value, instance.state, target)
    return dataclasses.replace(result.instance, pending_choice=target)
