"""Simulator run state and coloured console logging."""

from __future__ import annotations

import enum
import sys
from dataclasses import dataclass
from typing import TextIO

ANSI_FG_BLACK = "\33[1;30m"
ANSI_FG_RED = "\33[1;31m"
ANSI_FG_GREEN = "\33[1;32m"
ANSI_FG_YELLOW = "\33[1;33m"
ANSI_FG_BLUE = "\33[1;34m"
ANSI_FG_MAGENTA = "\33[1;35m"
ANSI_FG_CYAN = "\33[1;36m"
ANSI_FG_WHITE = "\33[1;37m"
ANSI_BG_BLACK = "\33[1;40m"
ANSI_BG_RED = "\33[1;41m"
ANSI_BG_GREEN = "\33[1;42m"
ANSI_BG_YELLOW = "\33[1;43m"
ANSI_BG_BLUE = "\33[1;44m"
ANSI_BG_MAGENTA = "\33[1;45m"
ANSI_BG_CYAN = "\33[1;46m"
ANSI_BG_WHITE = "\33[1;47m"
ANSI_NONE = "\33[0m"

WORD_MASK = 0xFFFFFFFF


class NPCStatus(enum.IntEnum):
    """Execution state of the simulated core."""

    RUNNING = 0
    END = 1
    STOP = 2
    ABORT = 3
    QUIT = 4


@dataclass
class NPCState:
    """Current status plus the pc and return value recorded at a halt."""

    state: NPCStatus = NPCStatus.RUNNING
    halt_pc: int = 0
    halt_ret: int = 0


def ansi_fmt(text: str, color: str) -> str:
    """Wrap text in an ANSI colour sequence followed by a reset."""
    return f"{color}{text}{ANSI_NONE}"


def log(message: str, stream: TextIO | None = None) -> None:
    """Write a blue log line to the given stream (stdout by default)."""
    out = sys.stdout if stream is None else stream
    out.write(ansi_fmt(message, ANSI_FG_BLUE) + "\n")
    out.flush()