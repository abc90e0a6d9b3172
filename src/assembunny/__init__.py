"""Assembunny: Interpreter for the four-register assembunny instruction set.

This package implements a small register machine with self-modifying code:
the ``tgl`` instruction rewrites the opcode of another instruction while the
program runs.

Core loop:
    fetch (pc) -> registry[opcode] -> execute -> state

Modules:
    state: RegisterId and the mutable MachineState
    decode: Operand/instruction variants and the text parser
    registry: Opcode handlers and the tgl substitution table
    machine: Main RegisterMachine orchestrator
"""

__version__ = "0.1.0"

from .state import MachineState, RegisterId
from .decode import (
    Immediate,
    Instruction,
    Opcode,
    ProgramParseError,
    Register,
    UnknownOpcodeError,
    parse_instruction,
    parse_program,
)
from .registry import OpcodeRegistry
from .machine import CycleLimitExceeded, ExecutionTraceEntry, RegisterMachine

__all__ = [
    "MachineState",
    "RegisterId",
    "Immediate",
    "Instruction",
    "Opcode",
    "ProgramParseError",
    "Register",
    "UnknownOpcodeError",
    "parse_instruction",
    "parse_program",
    "OpcodeRegistry",
    "CycleLimitExceeded",
    "ExecutionTraceEntry",
    "RegisterMachine",
]
