"""Debugger toolkit for a 32-bit RISC-V processor model: memory, registers, expressions, break/watchpoints, tracing and a command loop."""

__version__ = "0.1.0"