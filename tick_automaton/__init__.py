"""tick-automaton - Finite state machines with guarded moves and autonomous stepping."""
from __future__ import annotations

import logging

from tick_automaton.choices import get_choices, get_reachable_states
from tick_automaton.config import AutomatonConfig
from tick_automaton.definition import Definition, DefinitionBuilder, StateEntry, build
from tick_automaton.instance import Instance, create_instance
from tick_automaton.life import act, give_life, kill
from tick_automaton.ref import InstanceRef, is_shared
from tick_automaton.transitions import MoveResult, is_valid_transition, move, try_move
from tick_automaton.types import (
    ANY,
    RESERVED_NAMES,
    ActMode,
    AutomatonError,
    EmptyChoiceSetError,
    NoDefinitionError,
    NotAliveError,
    NoTransitionError,
    ReservedNameError,
    State,
    UnknownStateError,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ANY",
    "RESERVED_NAMES",
    "ActMode",
    "AutomatonConfig",
    "AutomatonError",
    "Definition",
    "DefinitionBuilder",
    "EmptyChoiceSetError",
    "Instance",
    "InstanceRef",
    "MoveResult",
    "NoDefinitionError",
    "NoTransitionError",
    "NotAliveError",
    "ReservedNameError",
    "State",
    "StateEntry",
    "UnknownStateError",
    "act",
    "build",
    "create_instance",
    "get_choices",
    "get_reachable_states",
    "give_life",
    "is_shared",
    "is_valid_transition",
    "kill",
    "move",
    "try_move",
]
