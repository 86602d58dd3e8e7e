"""General-purpose register file of the RV32E core."""

from __future__ import annotations

from typing import Iterable

REG_NAMES = (
    "$0", "ra", "sp", "gp", "tp", "t0", "t1", "t2",
    "s0", "s1", "a0", "a1", "a2", "a3", "a4", "a5",
)
REG_NUM = len(REG_NAMES)
_WORD_MASK = 0xFFFFFFFF
_PER_LINE = 4


class UnknownRegisterError(KeyError):
    """Raised for a register name that does not exist."""


def format_register_table(title: str, values: Iterable[int]) -> str:
    """Lay out register values four per line under a title."""
    lines = [title]
    row = ""
    for i, (name, value) in enumerate(zip(REG_NAMES, values)):
        if i and i % _PER_LINE == 0:
            lines.append(row)
            row = ""
        row += f"{name:<3} 0x{value:08x} "
    lines.append(row)
    return "\n".join(lines)


class RegisterFile:
    """Snapshot of the sixteen general-purpose registers."""

    def __init__(self) -> None:
        self._values = [0] * REG_NUM

    def _index(self, name: str) -> int:
        try:
            return REG_NAMES.index(name)
        except ValueError:
            raise UnknownRegisterError(name) from None

    def load(self, values: Iterable[int]) -> None:
        """Replace all register values."""
        new = [v & _WORD_MASK for v in values]
        if len(new) != REG_NUM:
            raise ValueError(f"expected {REG_NUM} register values, got {len(new)}")
        self._values = new

    def get(self, name: str) -> int:
        """Value of the named register."""
        return self._values[self._index(name)]

    def snapshot(self) -> tuple[int, ...]:
        return tuple(self._values)

    def matches(self, values: Iterable[int]) -> bool:
        """True when the given values equal the current registers."""
        return tuple(values) == self.snapshot()

    def format(self, pc: int) -> str:
        """All registers four per line, followed by the pc."""
        return format_register_table("npc_regs", self._values) + f"\n0x{pc:08x}\n"

    def format_reg(self, name: str) -> str:
        """One register as ``name 0xXXXXXXXX``."""
        return f"{name} 0x{self.get(name):08x}"