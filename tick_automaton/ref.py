"""InstanceRef - a lock-guarded cell for sharing one instance across threads."""
from __future__ import annotations

import threading
from typing import Any, Callable

from tick_automaton.instance import Instance


class InstanceRef:
    """Holds the current value of one logical instance.

    Instances are immutable, so reads never race. Updates from several
    threads go through ``swap`` or ``compare_and_set`` so that no update
    is lost.
    """

    def __init__(self, instance: Instance) -> None:
        self._instance = instance
        self._lock = threading.Lock()

    def get(self) -> Instance:
        return self._instance

    def reset(self, instance: Instance) -> Instance:
        """Replace the held instance unconditionally."""
        with self._lock:
            self._instance = instance
        return instance

    def swap(self, fn: Callable[..., Instance], *args: Any, **kwargs: Any) -> Instance:
        """Store ``fn(current, *args, **kwargs)`` and return it.

        ``fn`` runs under the lock; exceptions propagate and leave the
        held instance unchanged.
        """
        with self._lock:
            updated = fn(self._instance, *args, **kwargs)
            if not isinstance(updated, Instance):
                raise TypeError(
                    f"swap function returned {type(updated).__name__}, expected Instance"
                )
            self._instance = updated
        return updated

    def compare_and_set(self, expected: Instance, new: Instance) -> bool:
        """Store ``new`` only if the held instance is ``expected`` (identity)."""
        with self._lock:
            if self._instance is not expected:
                return False
            self._instance = new
            return True

    def __repr__(self) -> str:
        return f"InstanceRef({self._instance!r})"


def is_shared(value: object) -> bool:
    """True if ``value`` is an InstanceRef rather than a plain Instance."""
    return isinstance(value, InstanceRef)
