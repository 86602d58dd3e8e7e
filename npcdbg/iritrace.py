"""Recent-instruction trace kept in a ring buffer."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from typing import Iterable

from npcdbg.registers import REG_NAMES, REG_NUM
from npcdbg.ringbuffer import RingBuffer

MAX_INST_STR_LEN = 64
_ENTRY = struct.Struct(f"<I{MAX_INST_STR_LEN}s4xQ{REG_NUM}I")
ENTRY_SIZE = _ENTRY.size
_WORD_MASK = 0xFFFFFFFF
_SEPARATOR = "-" * 60


@dataclass(frozen=True)
class TraceEntry:
    """One executed instruction with the registers seen at that cycle."""

    pc: int
    inst: str
    cycle: int
    regs: tuple[int, ...]

    def pack(self) -> bytes:
        """Encode as the fixed-size binary record written by ``dump``."""
        text = self.inst.encode("utf-8")[: MAX_INST_STR_LEN - 1]
        return _ENTRY.pack(self.pc, text, self.cycle, *self.regs)

    @classmethod
    def unpack(cls, data: bytes) -> "TraceEntry":
        """Decode one binary record."""
        if len(data) != ENTRY_SIZE:
            raise ValueError(f"trace record must be {ENTRY_SIZE} bytes, got {len(data)}")
        pc, raw, cycle, *regs = _ENTRY.unpack(data)
        inst = raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")
        return cls(pc, inst, cycle, tuple(regs))


class InstructionTrace:
    """Keeps the last few executed instructions."""

    def __init__(self, num_entries: int = 16) -> None:
        self.capacity = num_entries + 1
        self._buffer: RingBuffer[TraceEntry] = RingBuffer(self.capacity)

    def record(self, pc: int, inst: str, cycle: int, regs: Iterable[int]) -> None:
        """Store one entry, overwriting the oldest when full."""
        values = tuple(r & _WORD_MASK for r in regs)
        if len(values) != REG_NUM:
            raise ValueError(f"expected {REG_NUM} register values, got {len(values)}")
        text = inst.encode("utf-8")[: MAX_INST_STR_LEN - 1].decode("utf-8", errors="ignore")
        self._buffer.write(TraceEntry(pc & _WORD_MASK, text, cycle & _WORD_MASK, values))

    def entries(self) -> list[TraceEntry]:
        """All stored entries, oldest first."""
        return list(self._buffer)

    def format(self) -> str:
        """Human-readable listing of every stored entry."""
        entries = self.entries()
        parts = [f"[iritrace] total {len(entries)} entry(s)\n"]
        for e in entries:
            parts.append(f"CYC:{e.cycle:<10}  PC:0x{e.pc:08x} {e.inst}\n")
            parts.append("  REGS:")
            for r, (name, value) in enumerate(zip(REG_NAMES, e.regs), start=1):
                parts.append(f" {name:<2}:{value:08x}")
                if r % 4 == 0:
                    parts.append("\n       ")
            parts.append("\n")
            parts.append(_SEPARATOR + "\n")
        return "".join(parts)

    def dump(self, path: str | os.PathLike) -> int:
        """Write every entry as binary records; return how many were written."""
        entries = self.entries()
        with open(path, "wb") as fp:
            for e in entries:
                fp.write(e.pack())
        return len(entries)