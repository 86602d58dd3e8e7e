"""Guest physical memory."""

from __future__ import annotations

import os

MBASE = 0x80000000
MSIZE = 128 * 1024 * 1024
PC_RESET_OFFSET = 0x0
RESET_VECTOR = MBASE + PC_RESET_OFFSET

_WORD_MASK = 0xFFFFFFFF
_VALID_LENGTHS = (1, 2, 4)


class Memory:
    """Little-endian byte-addressed memory starting at ``base``."""

    def __init__(self, base: int = MBASE, size: int = MSIZE) -> None:
        if size <= 0:
            raise ValueError("memory size must be positive")
        self.base = base
        self.size = size
        self._data = bytearray(size)

    @property
    def reset_vector(self) -> int:
        return self.base + PC_RESET_OFFSET

    def in_pmem(self, addr: int) -> bool:
        """True when ``addr`` lies inside guest memory."""
        return ((addr - self.base) & _WORD_MASK) < self.size

    @staticmethod
    def _check_length(length: int) -> None:
        if length not in _VALID_LENGTHS:
            raise ValueError(f"data length {length} not in 1/2/4")

    def read(self, addr: int, length: int) -> int:
        """Read 1, 2 or 4 bytes; addresses outside memory read as 0."""
        self._check_length(length)
        if not self.in_pmem(addr):
            return 0
        offset = (addr - self.base) & _WORD_MASK
        return int.from_bytes(self._data[offset:offset + length], "little")

    def write(self, addr: int, length: int, data: int) -> None:
        """Write 1, 2 or 4 bytes; writes outside memory are dropped."""
        self._check_length(length)
        if not self.in_pmem(addr):
            return
        offset = (addr - self.base) & _WORD_MASK
        mask = (1 << (8 * length)) - 1
        chunk = (data & mask).to_bytes(length, "little")
        end = min(offset + length, self.size)
        self._data[offset:end] = chunk[: end - offset]

    def reset(self) -> None:
        """Clear all memory to zero."""
        self._data[:] = bytes(self.size)

    def load_image(self, path: str | os.PathLike) -> int:
        """Copy an image file to the reset vector and return its size."""
        with open(path, "rb") as fp:
            image = fp.read()
        offset = PC_RESET_OFFSET
        if offset + len(image) > self.size:
            raise ValueError(
                f"image of {len(image)} bytes does not fit in {self.size} bytes of memory"
            )
        self._data[offset:offset + len(image)] = image
        return len(image)