"""Watchpoints that fire when an expression's value changes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator

NR_WP = 32


@dataclass
class Watchpoint:
    """A watched expression and the value it had when last checked."""

    number: int
    expression: str
    value: int


class WatchpointPool:
    """Holds up to ``size - 1`` watchpoints, numbered by position."""

    def __init__(self, evaluate: Callable[[str], int], size: int = NR_WP) -> None:
        if size < 1:
            raise ValueError("pool size must be at least 1")
        self._evaluate = evaluate
        self._limit = size - 1
        self._active: list[Watchpoint] = []

    def add(self, expression: str) -> Watchpoint:
        """Watch an expression, recording its current value."""
        if len(self._active) >= self._limit:
            raise RuntimeError("The watchpoint is full")
        value = self._evaluate(expression)
        wp = Watchpoint(len(self._active), expression, value)
        self._active.append(wp)
        return wp

    def remove(self, number: int) -> Watchpoint:
        """Delete a watchpoint; later ones move down one number."""
        if not 0 <= number < len(self._active):
            raise IndexError(f"no watchpoint {number}")
        removed = self._active.pop(number)
        for index, wp in enumerate(self._active):
            wp.number = index
        return removed

    def check(self) -> list[tuple[Watchpoint, int]]:
        """Re-evaluate every watchpoint; return those that changed with their old values."""
        changed = []
        for wp in self._active:
            new_value = self._evaluate(wp.expression)
            if new_value != wp.value:
                old_value, wp.value = wp.value, new_value
                changed.append((wp, old_value))
        return changed

    def format(self) -> str:
        """One line per watchpoint: number, expression, value."""
        if not self._active:
            return "There is no wp"
        return "\n".join(f"{wp.number} {wp.expression} {wp.value}" for wp in self._active)

    def __iter__(self) -> Iterator[Watchpoint]:
        return iter(list(self._active))