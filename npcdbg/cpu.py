"""Cycle-by-cycle driver for a simulated core, with debugger hooks."""

from __future__ import annotations

import itertools
import os
import sys
from dataclasses import dataclass
from typing import Callable, Iterable, Protocol, TextIO

from npcdbg.breakpoint import BreakpointPool
from npcdbg.ftrace import FunctionTracer
from npcdbg.iritrace import InstructionTrace
from npcdbg.memory import Memory
from npcdbg.registers import RegisterFile
from npcdbg.state import (
    ANSI_FG_GREEN,
    ANSI_FG_RED,
    NPCState,
    NPCStatus,
    ansi_fmt,
    log,
)
from npcdbg.watchpoint import WatchpointPool

MAX_INST_TO_PRINT = 10
BADTRAP_DUMP = "iritrace_on_badtrap.bin"


class Core(Protocol):
    """A clocked core model.

    ``npc`` is the address of the next instruction to fetch; after ``step``,
    ``dnpc`` is the dynamic next pc and ``snpc`` the static one (pc + 4).
    ``step`` runs one clock with the given instruction and returns True when
    the instruction was an ``ebreak``.
    """

    npc: int
    dnpc: int
    snpc: int

    def reset(self) -> None: ...

    def registers(self) -> Iterable[int]: ...

    def step(self, inst: int) -> bool: ...


@dataclass(frozen=True)
class CycleResult:
    """What one clock cycle fetched and where it went next."""

    pc: int
    inst: int
    npc: int
    dnpc: int
    snpc: int
    ebreak: bool = False


def raw_disassemble(pc: int, inst: int) -> str:
    """Fallback listing that shows the instruction word itself."""
    return f".word 0x{inst:08x}"


class Cpu:
    """Runs a core instruction by instruction and applies the debugger checks."""

    def __init__(
        self,
        core: Core,
        memory: Memory,
        registers: RegisterFile,
        breakpoints: BreakpointPool,
        watchpoints: WatchpointPool,
        tracer: FunctionTracer,
        itrace: InstructionTrace,
    ) -> None:
        self.core = core
        self.memory = memory
        self.registers = registers
        self.breakpoints = breakpoints
        self.watchpoints = watchpoints
        self.tracer = tracer
        self.itrace = itrace
        self.state = NPCState(NPCStatus.STOP)
        self.pc = 0
        self.cycle = 0
        self.out: TextIO | None = None
        self.disassemble: Callable[[int, int], str] = raw_disassemble
        self.badtrap_dump: str | os.PathLike = BADTRAP_DUMP
        self._print_step = False
        core.reset()

    def _emit(self, text: str) -> None:
        stream = self.out if self.out is not None else sys.stdout
        stream.write(text + "\n")

    def exec_once(self) -> CycleResult:
        """Fetch the instruction at the core's next pc and run one clock."""
        self.pc = self.core.npc
        inst = self.memory.read(self.pc, 4)
        self.registers.load(self.core.registers())
        ebreak = self.core.step(inst)
        self.cycle += 1
        if ebreak:
            self.state.state = NPCStatus.END
            self.state.halt_pc = self.pc
        return CycleResult(
            self.pc, inst, self.core.npc, self.core.dnpc, self.core.snpc, ebreak
        )

    def _trace(self, result: CycleResult) -> None:
        text = self.disassemble(result.pc, result.inst)
        if self._print_step:
            self._emit(f"0x{result.pc:08x}: {text}")

        changed = self.watchpoints.check()
        if changed:
            for wp, old in changed:
                self._emit(
                    f"{wp.number} {wp.expression}  old: 0x{old:08x} new: 0x{wp.value:08x} "
                )
            self.state.state = NPCStatus.STOP
            self._emit(f"nextPC : 0x{result.npc:08x}")
            self._emit(f"WP is triggered by {len(changed)} diff")

        hit = self.breakpoints.check(result.npc)
        if hit is not None:
            self._emit(f"Hit breakpoint {hit.number} at 0x{result.npc:08x}")
            self.state.state = NPCStatus.STOP

        self.itrace.record(result.pc, text, self.cycle, self.registers.snapshot())

        message = self.tracer.check(result.dnpc, result.snpc)
        if message:
            self._emit(message)

    def execute(self, n: int) -> int:
        """Run up to ``n`` instructions (all of them when negative); return how many ran."""
        steps = itertools.count() if n < 0 else range(n)
        done = 0
        for _ in steps:
            self._trace(self.exec_once())
            done += 1
            if self.state.state is not NPCStatus.RUNNING:
                break
        return done

    def run(self, n: int) -> NPCStatus:
        """Resume execution for ``n`` instructions (negative: until something stops it)."""
        self._print_step = 0 <= n < MAX_INST_TO_PRINT
        if self.state.state in (NPCStatus.END, NPCStatus.QUIT):
            self._emit(
                "Program execution has ended. "
                "To restart the program, exit NPC and run again."
            )
            return self.state.state
        self.state.state = NPCStatus.RUNNING

        self.execute(n)

        status = self.state.state
        if status is NPCStatus.RUNNING:
            self.state.state = NPCStatus.STOP
        elif status in (NPCStatus.END, NPCStatus.ABORT):
            if status is NPCStatus.ABORT:
                verdict = ansi_fmt("ABORT", ANSI_FG_RED)
            elif self.state.halt_ret == 0:
                verdict = ansi_fmt("HIT GOOD TRAP", ANSI_FG_GREEN)
            else:
                verdict = ansi_fmt("HIT BAD TRAP", ANSI_FG_RED)
            log(f"npc: {verdict} at pc = 0x{self.state.halt_pc:08x}", self.out)
            if self.state.halt_ret != 0:
                stream = self.out if self.out is not None else sys.stdout
                stream.write(self.itrace.format())
                count = self.itrace.dump(self.badtrap_dump)
                self._emit(f"[iritrace] dumped {count} entry(s) to {self.badtrap_dump}")
        return self.state.state