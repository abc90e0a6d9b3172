"""MachineState: Register file, program counter and program tape.

This module defines the core state structure for the assembunny machine.

State Components:
    - Registers: a-d (4 general-purpose signed integers, unbounded)
    - PC: Program counter (index of the next instruction to fetch)
    - Program: Mutable list of decoded instructions (``tgl`` rewrites it)
    - Cycle count: Total executed cycles

Unlike a read-only instruction ROM, the program tape is mutated in place
while it runs, so the state is updated in place rather than copied per cycle.
Use ``snapshot()`` when a frozen view is needed for tracing.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .decode import Instruction


class RegisterId(Enum):
    """The four assembunny registers, valued by their register-file slot."""

    A = 0
    B = 1
    C = 2
    D = 3

    @property
    def letter(self) -> str:
        return self.name.lower()

    @classmethod
    def from_name(cls, name: str) -> "RegisterId":
        """Map a register letter (case insensitive) to its RegisterId.

        Raises:
            KeyError: If the name is not one of a, b, c, d
        """
        try:
            return cls[name.upper()]
        except (KeyError, AttributeError):
            raise KeyError(f"Invalid register: {name}") from None


REGISTER_COUNT = len(RegisterId)


@dataclass
class MachineState:
    """Mutable machine state.

    Attributes:
        registers: Register file indexed by ``RegisterId.value``
        pc: Program counter (next instruction address)
        program: Instruction tape, rewritten in place by ``tgl``
        cycle_count: Number of execution cycles completed
    """
    registers: List[int] = field(default_factory=lambda: [0] * REGISTER_COUNT)
    pc: int = 0
    program: List["Instruction"] = field(default_factory=list)
    cycle_count: int = 0

    @property
    def halted(self) -> bool:
        """True iff the program counter is outside ``[0, len(program))``."""
        return not 0 <= self.pc < len(self.program)

    def snapshot(self) -> dict:
        """Create a copy of the current state for tracing.

        Returns:
            Dictionary with register values, pc, halted flag and cycle count
        """
        return {
            "registers": self.dump_registers(),
            "pc": self.pc,
            "halted": self.halted,
            "cycle_count": self.cycle_count,
            # Note: program excluded, trace entries record the fetched instruction
        }

    def get_register(self, reg) -> int:
        """Get value of a register.

        Args:
            reg: RegisterId or register letter (a-d, case insensitive)

        Raises:
            KeyError: If register doesn't exist
        """
        return self.registers[_as_register(reg).value]

    def set_register(self, reg, value: int) -> None:
        """Overwrite a register.

        Args:
            reg: RegisterId or register letter (a-d, case insensitive)
            value: New value

        Raises:
            KeyError: If register doesn't exist
        """
        self.registers[_as_register(reg).value] = value

    def dump_registers(self) -> Dict[str, int]:
        """Get a copy of all register values keyed by letter."""
        return {reg.letter: self.registers[reg.value] for reg in RegisterId}

    def __str__(self) -> str:
        """Human-readable state representation."""
        regs = " ".join(f"{k}={v}" for k, v in self.dump_registers().items())
        return f"[Cycle {self.cycle_count}] PC={self.pc} {regs} {'HALTED' if self.halted else ''}".rstrip()


def _as_register(reg) -> RegisterId:
    if isinstance(reg, RegisterId):
        return reg
    return RegisterId.from_name(reg)


def create_initial_state(
    program: List["Instruction"],
    registers: Optional[Mapping[str, int]] = None,
    pc: int = 0,
) -> MachineState:
    """Create initial machine state with a loaded program.

    Args:
        program: Decoded instructions; copied, so tgl never rewrites the caller's list
        registers: Optional initial values keyed by register letter (others start at 0)
        pc: Initial program counter

    Returns:
        Fresh MachineState with program loaded

    Raises:
        KeyError: If ``registers`` names an unknown register
    """
    state = MachineState(program=list(program), pc=pc)
    for name, value in (registers or {}).items():
        state.set_register(name, value)
    return state
