"""Function-call tracing from ELF symbols and observed jumps."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from typing import NamedTuple

MAX_NAMENUM = 64
SHT_SYMTAB = 2
STT_FUNC = 2

_EHDR = "16sHHIIIIIHHHHHH"
_SHDR = "10I"
_SYM = "IIIBBH"


class ElfError(ValueError):
    """Raised for an ELF file that cannot be read for symbols."""


@dataclass(frozen=True)
class FunctionSymbol:
    """A function name and its start address."""

    name: str
    address: int


def load_function_symbols(path: str | os.PathLike) -> list[FunctionSymbol]:
    """Function symbols from the first symbol table of a 32-bit ELF file."""
    with open(path, "rb") as fp:
        data = fp.read()
    if len(data) < 16 or data[:4] != b"\x7fELF":
        raise ElfError("not an ELF file")
    if data[4] != 1:
        raise ElfError("not a 32-bit ELF file")
    endian = {1: "<", 2: ">"}.get(data[5])
    if endian is None:
        raise ElfError("unknown ELF byte order")

    ehdr = struct.Struct(endian + _EHDR)
    shdr = struct.Struct(endian + _SHDR)
    sym = struct.Struct(endian + _SYM)
    try:
        fields = ehdr.unpack_from(data, 0)
        shoff, shnum = fields[6], fields[12]
        sections = [shdr.unpack_from(data, shoff + i * shdr.size) for i in range(shnum)]
    except struct.error:
        raise ElfError("truncated ELF header or section table") from None

    symtab = next((s for s in sections if s[1] == SHT_SYMTAB), None)
    if symtab is None:
        raise ElfError("Can't find symtab or strtab")
    link = symtab[6]
    if link >= shnum:
        raise ElfError(f"Invalid sh_link: {link}")
    strtab = sections[link]
    str_off, str_size = strtab[4], strtab[5]
    strdata = data[str_off:str_off + str_size]
    if len(strdata) != str_size:
        raise ElfError("can't read strtab")

    sym_off, sym_size, entsize = symtab[4], symtab[5], symtab[9]
    if entsize == 0:
        raise ElfError("symbol table entry size is zero")

    symbols = []
    for i in range(sym_size // entsize):
        try:
            st_name, st_value, _, st_info, _, _ = sym.unpack_from(data, sym_off + i * sym.size)
        except struct.error:
            raise ElfError("can't read symtab") from None
        if st_info & 0xF != STT_FUNC:
            continue
        if st_name >= len(strdata):
            raise ElfError(f"symbol name offset {st_name} outside strtab")
        end = strdata.find(b"\0", st_name)
        raw = strdata[st_name:] if end < 0 else strdata[st_name:end]
        symbols.append(FunctionSymbol(raw.decode("utf-8", errors="replace"), st_value))
    return symbols


class _Frame(NamedTuple):
    name: str
    address: int
    ret: int


class CallStack:
    """Stack of active calls, each with the address it returns to."""

    def __init__(self) -> None:
        self._frames: list[_Frame] = []

    def push(self, name: str, address: int, ret: int) -> _Frame:
        frame = _Frame(name[: MAX_NAMENUM - 1], address, ret)
        self._frames.append(frame)
        return frame

    def pop(self) -> _Frame | None:
        """Remove and return the top frame; None when empty."""
        return self._frames.pop() if self._frames else None

    def peek(self) -> int:
        """Return address of the top frame, or 0 when empty."""
        return self._frames[-1].ret if self._frames else 0

    def clear(self) -> None:
        self._frames.clear()

    def format(self) -> str:
        """Frames from the outermost call inwards, indented by depth."""
        lines = [
            f"{'  ' * depth}0x{frame.address:08x}: {frame.name} \n"
            for depth, frame in enumerate(self._frames)
        ]
        return "".join(lines) + "\n"

    def __len__(self) -> int:
        return len(self._frames)


class FunctionTracer:
    """Follows calls into known functions and returns from them."""

    def __init__(self, symbols: list[FunctionSymbol]) -> None:
        self.symbols = list(symbols)
        self.stack = CallStack()

    def check(self, target: int, ret: int) -> str | None:
        """Update the call stack for a jump to ``target``; describe any change."""
        if ret == self.stack.peek():
            frame = self.stack.pop()
            if frame is None:
                return None
            return f"Delete :0x{frame.address:08x} {frame.name}"
        for symbol in self.symbols:
            if symbol.address == target:
                frame = self.stack.push(symbol.name, target, ret)
                return f"ADD :0x{frame.address:08x} {frame.name}"
        return None

    def format(self) -> str:
        return self.stack.format()