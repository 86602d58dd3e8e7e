"""Fixed-size pool of address breakpoints."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator

from npcdbg.state import WORD_MASK

NR_BP = 32
_HEX_PREFIX = re.compile(r"\s*(?:0[xX])?([0-9a-fA-F]*)")


def _parse_hex(text: str) -> int:
    digits = _HEX_PREFIX.match(text).group(1)
    return int(digits, 16) & WORD_MASK if digits else 0


@dataclass(frozen=True)
class Breakpoint:
    """A numbered breakpoint on one address."""

    number: int
    address: int


class BreakpointPool:
    """Breakpoints drawn from a fixed set of numbers; freed numbers are reused first."""

    def __init__(self, size: int = NR_BP) -> None:
        if size < 1:
            raise ValueError("pool size must be at least 1")
        self._free = list(range(size - 1, -1, -1))
        self._active: list[Breakpoint] = []

    def add(self, address: int | str) -> Breakpoint:
        """Set a breakpoint; a string address is read as hexadecimal."""
        if not self._free:
            raise RuntimeError("No free breakpoint slot!")
        addr = _parse_hex(address) if isinstance(address, str) else address & WORD_MASK
        bp = Breakpoint(self._free.pop(), addr)
        self._active.insert(0, bp)
        return bp

    def remove(self, number: int) -> Breakpoint:
        """Delete the breakpoint with this number and return it."""
        for i, bp in enumerate(self._active):
            if bp.number == number:
                del self._active[i]
                self._free.append(number)
                return bp
        raise KeyError(f"No breakpoint with id {number} found.")

    def check(self, pc: int) -> Breakpoint | None:
        """The breakpoint set on ``pc``, if any."""
        return next((bp for bp in self._active if bp.address == pc), None)

    def format(self) -> str:
        """One line per breakpoint, newest first."""
        if not self._active:
            return "No breakpoints set."
        return "\n".join(f"Breakpoint {bp.number} at 0x{bp.address:08x}" for bp in self._active)

    def __iter__(self) -> Iterator[Breakpoint]:
        return iter(list(self._active))