# npcdbg

`npcdbg` is a small debugger toolkit for a 32-bit RISC-V processor model
that has sixteen general registers. It uses only the standard library.

The package has these modules:

- `npcdbg.memory`: `Memory` is a little-endian physical memory. Its base
  address is fixed, and it can load a raw image at the reset vector.
- `npcdbg.registers`: `RegisterFile` holds the registers, named `$0`, `ra`,
  `sp`, `gp`, `tp`, `t0`–`t2`, `s0`, `s1` and `a0`–`a5`.
- `npcdbg.expr`: `tokenize` and `ExpressionEvaluator` work on debugger
  expressions.
- `npcdbg.breakpoint`: `BreakpointPool`.
- `npcdbg.watchpoint`: `WatchpointPool`.
- `npcdbg.ftrace`: `load_function_symbols` reads ELF32 function symbols.
  `FunctionTracer` and `CallStack` follow the call stack.
- `npcdbg.ringbuffer` and `npcdbg.iritrace`: `RingBuffer` and
  `InstructionTrace` keep a ring of recent instructions.
- `npcdbg.cpu`: `Cpu` steps a core model and applies the debugger checks.
- `npcdbg.sdb`: `Debugger` is the command interpreter.
- `npcdbg.state`: `NPCStatus`, `NPCState`, `ansi_fmt` and `log`.

## Memory and registers

```python
from npcdbg.memory import Memory
from npcdbg.registers import RegisterFile

mem = Memory(0x80000000, 128 * 1024 * 1024)
mem.write(0x80000000, 4, 0x00100073)
assert mem.read(0x80000000, 4) == 0x00100073

regs = RegisterFile()
regs.load([0] * 16)
print(regs.format(0x80000000))   # four registers per line, then the pc
print(regs.format_reg("sp"))     # "sp 0x00000000"
```

- Accesses must be 1, 2 or 4 bytes wide. Any other width raises
  `ValueError`.
- A read outside memory returns 0, and a write outside memory is ignored.
- `Memory.load_image(path)` copies a file to the reset vector and returns
  its size.
- `RegisterFile.get` raises `UnknownRegisterError`, a `KeyError`, when the
  name is unknown.

## Expressions

```python
from npcdbg.expr import ExpressionEvaluator

ev = ExpressionEvaluator(regs, mem)
ev.evaluate("(1 + 2) * 3")        # 9
ev.evaluate("$sp == 0")           # 1
ev.evaluate("*0x80000000")        # the word stored at that address
```

- Expressions support decimal numbers (a `u` suffix is allowed), hex numbers,
  registers written `$name`, `+ - * /`, `==`, `!=`, `&&`, parentheses, and a
  unary `*` that dereferences a word in memory.
- Results are unsigned 32-bit integers.
- `ExprError` is raised in these cases:
  - the text cannot be tokenized
  - the expression is empty or malformed
  - a register is unknown
  - there is a division by zero

## Breakpoints and watchpoints

```python
from npcdbg.breakpoint import BreakpointPool
from npcdbg.watchpoint import WatchpointPool

bps = BreakpointPool(32)
bp = bps.add(0x80000010)    # a string such as "80000010" is read as hex
bps.check(0x80000010)       # the Breakpoint, or None
bps.remove(bp.number)       # KeyError if there is no such number

wps = WatchpointPool(ev.evaluate, 32)
wps.add("$a0")
changed = wps.check()       # [(watchpoint, old_value), ...]
```

- A breakpoint pool raises `RuntimeError` when it has no free number left.
- A watchpoint pool holds at most `size - 1` watchpoints.
- Watchpoints are numbered by their position in the pool. Removing one moves
  the later ones down one number. An unknown number raises `IndexError`.

## Tracing

```python
from npcdbg.ftrace import load_function_symbols, FunctionTracer
from npcdbg.iritrace import InstructionTrace, TraceEntry

tracer = FunctionTracer(load_function_symbols("program.elf"))
tracer.check(target=0x80000100, ret=0x80000014)   # "ADD :0x80000100 main" or None

itrace = InstructionTrace(16)          # keeps the last 17 entries
itrace.record(0x80000000, "addi\tsp, sp, -16", 1, [0] * 16)
print(itrace.format())
itrace.dump("trace.bin")               # fixed-size binary records
```

- `load_function_symbols` raises `ElfError` for a file that is not a
  readable ELF32 file with a symbol table.
- A file written by `InstructionTrace.dump` is a sequence of records, each
  `npcdbg.iritrace.ENTRY_SIZE` bytes long. `TraceEntry.unpack` decodes one
  record.

## Running a core under the debugger

`Cpu` drives a core object that you supply. The core needs:

- the attributes `npc`, `dnpc` and `snpc`
- a method `reset()`
- a method `registers()` that returns sixteen values
- a method `step(inst)` that runs one clock and returns `True` for an
  `ebreak`

```python
from npcdbg.cpu import Cpu
from npcdbg.ftrace import FunctionTracer
from npcdbg.sdb import Debugger

class StraightLineCore:
    def __init__(self):
        self.npc = self.dnpc = self.snpc = 0x80000000
    def reset(self):
        self.npc = 0x80000000
    def registers(self):
        return [0] * 16
    def step(self, inst):
        self.snpc = self.dnpc = self.npc + 4
        self.npc = self.dnpc
        return inst == 0x00100073   # ebreak

cpu = Cpu(StraightLineCore(), mem, regs, bps, wps, FunctionTracer([]), itrace)
Debugger(cpu, ev).mainloop(["si 3", "info r", "q"])
```

`Cpu.run(n)` runs `n` instructions. A negative `n` runs until something
stops execution: a watchpoint changes, a breakpoint is hit, or an `ebreak`
ends the program. At the end of the program the CPU logs either a good trap
or a bad trap. The trap is bad when `cpu.state.halt_ret` is non-zero. On a
bad trap it also prints the instruction trace and dumps it to
`cpu.badtrap_dump`, which is `iritrace_on_badtrap.bin` by default. You can
set `cpu.disassemble` to a function `(pc, inst) -> str`. The default shows
`.word 0xXXXXXXXX`.

`Debugger` accepts these commands:

| Command | What it does |
|---|---|
| `help [CMD]` | describe all commands, or one |
| `c` | continue until something stops execution |
| `q` | quit the command loop |
| `si [N]` | step N instructions (default 1) |
| `info r\|w\|b` | show registers, watchpoints or breakpoints |
| `x N EXPR` | print N words of memory from the address EXPR |
| `p FILE` | check lines of `EXPECTED EXPR` in FILE against the evaluator |
| `w EXPR` | add a watchpoint |
| `b ADDR` | add a breakpoint (ADDR in hex) |
| `d w\|b N` | delete a watchpoint or breakpoint |
| `ft` | print the current call stack |

There are two ways to feed it commands:

- `Debugger.mainloop(lines)` reads commands from any iterable. With no
  argument it prompts `(npc) ` on the terminal.
- `Debugger.execute_line(line)` runs a single command.

## What the package does not do

- It does not model any processor hardware. The core given to `Cpu` must
  come from elsewhere.
- It has no built-in instruction disassembler.
- It does not compare execution against a reference model.
- It installs no command-line program. You start the debugger from Python,
  as shown above.