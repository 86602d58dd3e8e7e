"""Interactive command loop of the simple debugger."""

from __future__ import annotations

import re
import sys
from typing import Callable, Iterable, TextIO

from npcdbg.cpu import Cpu
from npcdbg.expr import ExprError, ExpressionEvaluator
from npcdbg.state import WORD_MASK, NPCStatus

PROMPT = "(npc) "
_ATOI = re.compile(r"\s*([+-]?\d+)")
_CHECK_LINE = re.compile(r"\s*([+-]?\d+)\s+([^\n]*)")


def _atoi(text: str | None) -> int:
    if not text:
        return 0
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


class Debugger:
    """Reads commands and drives the CPU, breakpoints and watchpoints."""

    def __init__(self, cpu: Cpu, evaluator: ExpressionEvaluator, out: TextIO | None = None) -> None:
        self.cpu = cpu
        self.evaluator = evaluator
        self.out = out
        if out is not None:
            cpu.out = out
        self._commands: dict[str, tuple[str, Callable[[str | None], bool]]] = {
            "help": ("Display information about all supported commands", self._cmd_help),
            "c": ("Continue the execution of the program", self._cmd_c),
            "q": ("Exit NEMU", self._cmd_q),
            "si": ("Execute one instruction", self._cmd_si),
            "info": ("info (r)/(w)/(b)", self._cmd_info),
            "x": ("x N EXPR", self._cmd_x),
            "p": ("p $expr_resource", self._cmd_p),
            "w": ("w EXPR", self._cmd_w),
            "b": ("b 0x...", self._cmd_b),
            "d": ("d (w)/(b) N", self._cmd_d),
            "ft": ("get ftrace", self._cmd_ft),
        }

    def _emit(self, text: str) -> None:
        stream = self.out if self.out is not None else sys.stdout
        stream.write(text + "\n")

    def execute_line(self, line: str) -> bool:
        """Run one command line; return False when the debugger should exit."""
        text = line.rstrip("\n").lstrip(" ")
        if not text:
            return True
        cmd, _, rest = text.partition(" ")
        args = rest if rest else None
        entry = self._commands.get(cmd)
        if entry is None:
            self._emit(f"Unknown command '{cmd}'")
            return True
        return entry[1](args)

    def mainloop(self, lines: Iterable[str] | None = None) -> None:
        """Process command lines until ``q`` or the input runs out."""
        for line in (self._prompt_lines() if lines is None else lines):
            if not self.execute_line(line):
                return

    @staticmethod
    def _prompt_lines():
        try:
            import readline  # noqa: F401  (enables line editing and history)
        except ImportError:
            pass
        while True:
            try:
                yield input(PROMPT)
            except EOFError:
                return

    def check_expressions(self, path) -> list[tuple[str, int, int]]:
        """Check lines of ``EXPECTED EXPR``; return (expr, expected, actual) for mismatches."""
        failures = []
        with open(path, "r", encoding="utf-8") as fp:
            for line in fp:
                match = _CHECK_LINE.match(line)
                if not match:
                    continue
                expected = int(match.group(1)) & WORD_MASK
                expression = match.group(2)
                try:
                    actual = self.evaluator.evaluate(expression)
                except ExprError:
                    continue
                if actual != expected:
                    failures.append((expression, expected, actual))
                    self._emit(f"{expression} : read result:{expected} || result:{actual} ")
        if not failures:
            self._emit("ALL test past")
        return failures

    def _cmd_help(self, args: str | None) -> bool:
        words = args.split() if args else []
        if not words:
            for name, (description, _) in self._commands.items():
                self._emit(f"{name} - {description}")
            return True
        arg = words[0]
        entry = self._commands.get(arg)
        if entry is None:
            self._emit(f"Unknown command '{arg}'")
        else:
            self._emit(f"{arg} - {entry[0]}")
        return True

    def _cmd_c(self, args: str | None) -> bool:
        self.cpu.run(-1)
        return True

    def _cmd_q(self, args: str | None) -> bool:
        self.cpu.state.state = NPCStatus.QUIT
        return False

    def _cmd_si(self, args: str | None) -> bool:
        self.cpu.run(_atoi(args) if args else 1)
        return True

    def _cmd_info(self, args: str | None) -> bool:
        if not args:
            self._emit("Please input the mode")
            return True
        mode = args[0]
        if mode == "r":
            self._emit("display the info of reg")
            self._emit(self.cpu.registers.format(self.cpu.pc).rstrip("\n"))
        elif mode == "w":
            self._emit(self.cpu.watchpoints.format())
        elif mode == "b":
            self._emit(self.cpu.breakpoints.format())
        else:
            self._emit("We don't have this mode")
        return True

    def _cmd_x(self, args: str | None) -> bool:
        if not args:
            self._emit("Usage: x N EXPR")
            return True
        count_text, _, expression = args.lstrip(" ").partition(" ")
        try:
            start = self.evaluator.evaluate(expression)
        except ExprError as err:
            self._emit(str(err))
            return True
        for i in range(_atoi(count_text)):
            addr = (start + i * 4) & WORD_MASK
            self._emit(f"0x{addr:08x}: 0x{self.cpu.memory.read(addr, 4):08x}")
        return True

    def _cmd_p(self, args: str | None) -> bool:
        if not args:
            self._emit("Usage: p FILE")
            return True
        try:
            self.check_expressions(args.strip())
        except OSError as err:
            self._emit(f"Can not open '{args.strip()}': {err.strerror}")
        return True

    def _cmd_w(self, args: str | None) -> bool:
        if not args:
            self._emit("Usage: w EXPR")
            return True
        try:
            wp = self.cpu.watchpoints.add(args)
        except RuntimeError:
            self._emit("Failed: The watchpoint is full")
        except ExprError:
            self._emit("This expr is wrong")
        else:
            self._emit(f"NEW_WP : {wp.number} {wp.expression} {wp.value}")
        return True

    def _cmd_b(self, args: str | None) -> bool:
        if not args:
            self._emit("Usage: b ADDRESS")
            return True
        try:
            bp = self.cpu.breakpoints.add(args)
        except RuntimeError:
            self._emit("No free breakpoint slot!")
        else:
            self._emit(f"Set breakpoint {bp.number} at 0x{bp.address:08x}")
        return True

    def _cmd_d(self, args: str | None) -> bool:
        if not args:
            self._emit("Usage: d (w)/(b) N")
            return True
        mode, _, rest = args.lstrip(" ").partition(" ")
        number = _atoi(rest)
        if mode[:1] == "w":
            try:
                self.cpu.watchpoints.remove(number)
            except IndexError:
                self._emit(f"No watchpoint with id {number} found.")
        elif mode[:1] == "b":
            try:
                self.cpu.breakpoints.remove(number)
            except KeyError:
                self._emit(f"No breakpoint with id {number} found.")
            else:
                self._emit(f"Deleted breakpoint {number}")
        else:
            self._emit("We don't have this kind of type")
        return True

    def _cmd_ft(self, args: str | None) -> bool:
        stream = self.out if self.out is not None else sys.stdout
        stream.write(self.cpu.tracer.format())
        return True