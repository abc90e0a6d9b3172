"""Decode: Assembunny text to instruction variants.

This module turns program text into the decoded instruction tape the
machine executes.

Architecture:
    Source text -> parse_program -> [Instruction, ...] -> RegisterMachine

Each operand is decoded once, at load time, into either an ``Immediate``
(the token parses as an integer) or a ``Register`` (any of a-d). Opcode
and operands are kept separately so that ``tgl`` can swap the opcode while
leaving the operands untouched; whether an operand shape is valid for the
current opcode is only decided at execution time.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Union

from .state import RegisterId


class ProgramParseError(ValueError):
    """Raised when program text cannot be decoded.

    Attributes:
        line_number: 1-based source line (None when parsing a lone instruction)
        line: Offending source text
    """

    def __init__(self, message: str, line_number=None, line: str = ""):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number
        self.line = line


class UnknownOpcodeError(ProgramParseError):
    """Raised for a mnemonic outside the assembunny instruction set."""


class Opcode(Enum):
    """Assembunny opcodes, valued by (mnemonic, arity)."""

    CPY = ("cpy", 2)
    INC = ("inc", 1)
    DEC = ("dec", 1)
    JNZ = ("jnz", 2)
    TGL = ("tgl", 1)

    @property
    def mnemonic(self) -> str:
        return self.value[0]

    @property
    def arity(self) -> int:
        return self.value[1]

    @classmethod
    def from_mnemonic(cls, mnemonic: str) -> "Opcode":
        for opcode in cls:
            if opcode.mnemonic == mnemonic:
                return opcode
        raise UnknownOpcodeError(f"Illegal instruction: {mnemonic}")


@dataclass(frozen=True)
class Immediate:
    """Literal integer operand."""
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Register:
    """Register reference operand."""
    register: RegisterId

    def __str__(self) -> str:
        return self.register.letter


Operand = Union[Immediate, Register]


@dataclass(frozen=True)
class Instruction:
    """One slot of the program tape.

    Attributes:
        opcode: Current opcode (``tgl`` replaces the slot with a new opcode)
        operands: Operands as decoded from the source text
    """
    opcode: Opcode
    operands: Tuple[Operand, ...]

    def with_opcode(self, opcode: Opcode) -> "Instruction":
        """Return a copy of this instruction with a different opcode."""
        return Instruction(opcode, self.operands)

    def __str__(self) -> str:
        return " ".join([self.opcode.mnemonic] + [str(op) for op in self.operands])


_IMMEDIATE = re.compile(r'^[+-]?\d+$')


def parse_operand(token: str) -> Operand:
    """Decode a single operand token.

    Args:
        token: Integer literal (e.g. "-2") or register letter (e.g. "a")

    Returns:
        Immediate or Register operand

    Raises:
        ProgramParseError: If the token is neither
    """
    if _IMMEDIATE.match(token):
        return Immediate(int(token))
    try:
        return Register(RegisterId.from_name(token))
    except KeyError:
        raise ProgramParseError(f"Illegal operand: {token}") from None


def parse_instruction(text: str) -> Instruction:
    """Decode one line of assembunny, e.g. ``"jnz a -2"``.

    Raises:
        UnknownOpcodeError: If the mnemonic is not an assembunny opcode
        ProgramParseError: On a wrong operand count or malformed operand
    """
    tokens = text.split()
    if not tokens:
        raise ProgramParseError("Empty instruction")

    opcode = Opcode.from_mnemonic(tokens[0])
    args = tokens[1:]
    if len(args) != opcode.arity:
        raise ProgramParseError(
            f"{opcode.mnemonic} takes {opcode.arity} operand(s), got {len(args)}"
        )
    return Instruction(opcode, tuple(parse_operand(arg) for arg in args))


def parse_program(source: str) -> List[Instruction]:
    """Parse assembunny source code into a list of instructions.

    Handles:
        - Comments (starting with #)
        - Blank lines

    Args:
        source: Program text, one instruction per line

    Returns:
        List of decoded instructions

    Raises:
        ProgramParseError: With the 1-based line number of the first bad line
    """
    instructions = []

    for line_number, raw in enumerate(source.splitlines(), start=1):
        line = re.sub(r'#.*$', '', raw).strip()
        if not line:
            continue
        try:
            instructions.append(parse_instruction(line))
        except ProgramParseError as e:
            raise type(e)(str(e), line_number=line_number, line=raw) from None

    return instructions
