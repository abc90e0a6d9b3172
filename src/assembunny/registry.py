"""OpcodeRegistry: Execution primitives for the assembunny opcodes.

This module implements the registry pattern for machine operations: each
opcode maps to one handler that applies its effect to the machine state.

Registry Keys:
    CPY: Copy a value into a register
    INC: Increment register by 1
    DEC: Decrement register by 1
    JNZ: Relative jump if a value is non-zero
    TGL: Toggle the opcode of another instruction

Handlers run after fetch has captured the instruction and advanced the
program counter to ``address + 1``. Operand shapes are checked here, at every
execution, since ``tgl`` can leave a slot with operands its new opcode cannot
use (``cpy 1 2``); such instructions are skipped, never rejected.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from .decode import Immediate, Instruction, Opcode, Operand, Register
from .state import MachineState

logger = logging.getLogger(__name__)


# Opcode substitution applied by tgl; operands are preserved
TOGGLE_TABLE: Dict[Opcode, Opcode] = {
    Opcode.INC: Opcode.DEC,
    Opcode.DEC: Opcode.INC,
    Opcode.TGL: Opcode.INC,
    Opcode.JNZ: Opcode.CPY,
    Opcode.CPY: Opcode.JNZ,
}


@dataclass(frozen=True)
class Outcome:
    """What a single executed instruction did beyond its register effects.

    Attributes:
        skipped: Operands were invalid for the opcode, nothing happened
        toggled: Address rewritten by tgl, if any
    """
    skipped: bool = False
    toggled: Optional[int] = None


Handler = Callable[[MachineState, int, Tuple[Operand, ...]], Outcome]

_DONE = Outcome()
_SKIPPED = Outcome(skipped=True)


def resolve(state: MachineState, operand: Operand) -> int:
    """Read an operand: an immediate's value or a register's current value."""
    if isinstance(operand, Immediate):
        return operand.value
    return state.get_register(operand.register)


class OpcodeRegistry:
    """Registry of opcode handlers.

    The registry is frozen after initialization and must cover every opcode.

    Attributes:
        _handlers: Dictionary mapping opcodes to handler functions
        _frozen: Whether the registry is locked against modifications
    """

    def __init__(self):
        """Initialize registry with all opcode handlers."""
        self._handlers: Dict[Opcode, Handler] = {}
        self._frozen = False
        self._register_all_handlers()
        self.freeze()

    def _register_all_handlers(self) -> None:
        # Data movement
        self.register(Opcode.CPY, self._op_cpy)

        # Arithmetic
        self.register(Opcode.INC, self._op_inc)
        self.register(Opcode.DEC, self._op_dec)

        # Control flow
        self.register(Opcode.JNZ, self._op_jnz)

        # Self-modification
        self.register(Opcode.TGL, self._op_tgl)

    def register(self, opcode: Opcode, handler: Handler) -> None:
        """Register a handler for an opcode.

        Raises:
            RuntimeError: If registry is frozen
            ValueError: If opcode already registered
        """
        if self._frozen:
            raise RuntimeError("Cannot register handlers: registry is frozen")
        if opcode in self._handlers:
            raise ValueError(f"Handler already registered: {opcode.mnemonic}")
        self._handlers[opcode] = handler

    def freeze(self) -> None:
        """Freeze the registry to prevent further modifications.

        Raises:
            RuntimeError: If some opcode has no handler
        """
        missing = set(Opcode) - set(self._handlers)
        if missing:
            names = ", ".join(sorted(op.mnemonic for op in missing))
            raise RuntimeError(f"No handler for opcode(s): {names}")
        self._frozen = True

    def is_frozen(self) -> bool:
        """Check if registry is frozen."""
        return self._frozen

    def execute(self, state: MachineState, address: int, instruction: Instruction) -> Outcome:
        """Execute one fetched instruction.

        Args:
            state: Machine state, with pc already advanced past ``address``
            address: Address the instruction was fetched from
            instruction: The instruction as captured at fetch

        Returns:
            Outcome of the instruction
        """
        handler = self._handlers[instruction.opcode]
        outcome = handler(state, address, instruction.operands)
        state.cycle_count += 1
        return outcome

    # =========================================================================
    # Data Movement
    # =========================================================================

    def _op_cpy(self, state: MachineState, address: int, operands) -> Outcome:
        """cpy x y - Copy x (immediate or register) into register y."""
        src, dst = operands
        if not isinstance(dst, Register):
            return _SKIPPED
        state.set_register(dst.register, resolve(state, src))
        return _DONE

    # =========================================================================
    # Arithmetic
    # =========================================================================

    def _op_inc(self, state: MachineState, address: int, operands) -> Outcome:
        """inc x - Increase register x by one."""
        return self._add(state, operands[0], 1)

    def _op_dec(self, state: MachineState, address: int, operands) -> Outcome:
        """dec x - Decrease register x by one."""
        return self._add(state, operands[0], -1)

    def _add(self, state: MachineState, dst: Operand, delta: int) -> Outcome:
        if not isinstance(dst, Register):
            return _SKIPPED
        state.set_register(dst.register, state.get_register(dst.register) + delta)
        return _DONE

    # =========================================================================
    # Control Flow
    # =========================================================================

    def _op_jnz(self, state: MachineState, address: int, operands) -> Outcome:
        """jnz x y - Jump y instructions away from this one if x is not zero.

        Both x and y may be immediates or registers.
        """
        cond, offset = operands
        if resolve(state, cond) != 0:
            state.pc = address + resolve(state, offset)
        return _DONE

    # =========================================================================
    # Self-Modification
    # =========================================================================

    def _op_tgl(self, state: MachineState, address: int, operands) -> Outcome:
        """tgl x - Toggle the instruction x away from this one.

        Targets outside the program are ignored. The rewritten slot only
        takes effect the next time it is fetched, including when x is 0.
        """
        target = address + resolve(state, operands[0])
        if not 0 <= target < len(state.program):
            logger.debug("tgl at %d: target %d outside program, ignored", address, target)
            return _DONE

        current = state.program[target]
        state.program[target] = current.with_opcode(TOGGLE_TABLE[current.opcode])
        return Outcome(toggled=target)


# Singleton registry instance
_registry: Optional[OpcodeRegistry] = None


def get_registry() -> OpcodeRegistry:
    """Get the singleton opcode registry instance."""
    global _registry
    if _registry is None:
        _registry = OpcodeRegistry()
    return _registry
