[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "npcdbg"
version = "0.1.0"
description = "A simple debugger toolkit for a 32-bit RISC-V processor model: memory, registers, expressions, break/watchpoints and call and instruction tracing."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "debugger",
    "risc-v",
    "simulator",
    "watchpoint",
    "breakpoint",
    "ftrace",
    "instruction-trace",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Debuggers",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["npcdbg"]

[tool.hatch.build.targets.sdist]
include = ["npcdbg", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
