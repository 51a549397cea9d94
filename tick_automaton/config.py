"""Automaton configuration dataclass."""
from __future__ import annotations

from dataclasses import dataclass

from tick_automaton.types import ActMode


@dataclass(frozen=True)
class AutomatonConfig:
    """Immutable configuration attached to a Definition at build time.

    Attributes:
        strict_transitions: When True, ``move`` raises NoTransitionError unless
            a direct ``from -> to`` edge or an ``ANY -> to`` entry edge exists.
            When False, an unregistered edge behaves as the identity transform.
        default_mode: Stepping policy used by ``act`` when no mode is given.
    """

    strict_transitions: bool = False
    default_mode: ActMode = ActMode.SEQUENTIAL

    def __post_init__(self) -> None:
        if not isinstance(self.default_mode, ActMode):
            object.__setattr__(self, "default_mode", ActMode(self.default_mode))
