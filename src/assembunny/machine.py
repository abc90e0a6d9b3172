"""RegisterMachine: Fetch-decode-execute loop for assembunny programs.

This module implements the full execution pipeline:
    PROGRAM -> FETCH -> REGISTRY -> EXECUTE -> STATE

Fetch reads the instruction at the program counter as it currently stands on
the tape, so an instruction rewritten by ``tgl`` executes with its new opcode
the next time it is reached. The machine halts only when the program counter
leaves the program; there is no halt instruction.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from .decode import Instruction, parse_program
from .registry import OpcodeRegistry, get_registry
from .state import MachineState, create_initial_state

logger = logging.getLogger(__name__)


class CycleLimitExceeded(RuntimeError):
    """Raised by ``RegisterMachine.run`` when the cycle budget runs out."""


@dataclass
class ExecutionTraceEntry:
    """Single entry in the execution trace.

    Attributes:
        cycle: Cycle number (0-indexed)
        address: Address the instruction was fetched from
        instruction: Instruction text as fetched
        pre_state: State before execution
        post_state: State after execution
        skipped: Whether the instruction was skipped for invalid operands
        toggled: Address rewritten by a tgl, if any
    """
    cycle: int
    address: int
    instruction: str
    pre_state: dict
    post_state: dict
    skipped: bool = False
    toggled: Optional[int] = None


class RegisterMachine:
    """Assembunny interpreter over a mutable instruction tape.

    Attributes:
        registry: OpcodeRegistry with the opcode handlers
        state: Current machine state
        trace: Execution trace entries (only recorded when tracing)
        tracing: Whether each cycle is recorded in ``trace``
    """

    def __init__(
        self,
        program: List[Instruction],
        registers: Optional[Mapping[str, int]] = None,
        pc: int = 0,
        trace: bool = False,
    ):
        """Initialize the machine.

        Args:
            program: Decoded instructions; the machine runs on its own copy
            registers: Initial register values by letter (others start at 0)
            pc: Initial program counter
            trace: Record an ExecutionTraceEntry for every cycle
        """
        self.registry: OpcodeRegistry = get_registry()
        self.state: MachineState = create_initial_state(program, registers, pc)
        self.tracing = trace
        self.trace: List[ExecutionTraceEntry] = []

    @classmethod
    def from_source(cls, source: str, **kwargs) -> "RegisterMachine":
        """Parse assembunny source and build a machine for it.

        Raises:
            ProgramParseError: If the source does not parse
        """
        return cls(parse_program(source), **kwargs)

    @property
    def halted(self) -> bool:
        return self.state.halted

    def step(self) -> Optional[ExecutionTraceEntry]:
        """Execute a single instruction cycle.

        Does nothing when the machine is halted.

        Returns:
            ExecutionTraceEntry for the cycle when tracing, otherwise None
        """
        state = self.state
        if state.halted:
            return None

        # FETCH: capture the slot before anything can rewrite it
        address = state.pc
        instruction = state.program[address]
        state.pc = address + 1
        pre_state = self._snapshot_before(address) if self.tracing else None

        # EXECUTE
        outcome = self.registry.execute(state, address, instruction)

        if outcome.skipped:
            logger.debug("skipped invalid instruction at %d: %s", address, instruction)
        if outcome.toggled is not None:
            logger.debug(
                "tgl at %d rewrote %d to: %s",
                address, outcome.toggled, state.program[outcome.toggled],
            )

        if not self.tracing:
            return None

        entry = ExecutionTraceEntry(
            cycle=state.cycle_count - 1,
            address=address,
            instruction=str(instruction),
            pre_state=pre_state,
            post_state=state.snapshot(),
            skipped=outcome.skipped,
            toggled=outcome.toggled,
        )
        self.trace.append(entry)
        return entry

    def _snapshot_before(self, address: int) -> dict:
        snapshot = self.state.snapshot()
        snapshot["pc"] = address
        snapshot["halted"] = False
        return snapshot

    def run_to_halt(self) -> Dict[str, int]:
        """Run until the program counter leaves the program.

        There is no cycle limit; use ``run`` for bounded execution.

        Returns:
            Final register values
        """
        step = self.step
        state = self.state
        while not state.halted:
            step()
        logger.info("halted at pc=%d after %d cycles", state.pc, state.cycle_count)
        return self.dump_registers()

    def run(self, max_cycles: Optional[int] = None) -> Dict[str, int]:
        """Run until halted, or for at most ``max_cycles`` cycles.

        Args:
            max_cycles: Cycle budget for this call (None for unbounded)

        Returns:
            Final register values

        Raises:
            CycleLimitExceeded: If the budget runs out before the machine halts
        """
        if max_cycles is None:
            return self.run_to_halt()

        for _ in range(max_cycles):
            if self.state.halted:
                break
            self.step()

        if not self.state.halted:
            raise CycleLimitExceeded(f"Max cycles ({max_cycles}) exceeded")

        logger.info("halted at pc=%d after %d cycles", self.state.pc, self.state.cycle_count)
        return self.dump_registers()

    def get_register(self, reg: str) -> int:
        """Get value of a register (a-d)."""
        return self.state.get_register(reg)

    def dump_registers(self) -> Dict[str, int]:
        """Get all register values keyed by letter."""
        return self.state.dump_registers()

    def get_pc(self) -> int:
        return self.state.pc

    def get_cycle_count(self) -> int:
        return self.state.cycle_count

    def is_halted(self) -> bool:
        return self.state.halted

    def get_trace(self) -> List[ExecutionTraceEntry]:
        return self.trace

    def listing(self) -> List[str]:
        """Current program text, reflecting any toggles so far."""
        return [str(instruction) for instruction in self.state.program]

    def print_trace(self) -> None:
        """Print execution trace in human-readable format."""
        print("=" * 70)
        print("ASSEMBUNNY EXECUTION TRACE")
        print("=" * 70)

        for entry in self.trace:
            status = "SKIPPED" if entry.skipped else "OK"
            print(f"\n[Cycle {entry.cycle}] {status}")
            print(f"  {entry.address:>4}: {entry.instruction}")

            pre_regs = entry.pre_state.get("registers", {})
            post_regs = entry.post_state.get("registers", {})
            changes = []
            for reg in sorted(pre_regs.keys()):
                if pre_regs[reg] != post_regs.get(reg, pre_regs[reg]):
                    changes.append(f"{reg}: {pre_regs[reg]} → {post_regs[reg]}")
            if changes:
                print(f"  Changes: {', '.join(changes)}")

            if entry.toggled is not None:
                print(f"  Toggled: {entry.toggled}")

            post_pc = entry.post_state.get("pc", entry.address + 1)
            if post_pc != entry.address + 1:
                print(f"  PC: {entry.address} → {post_pc}")

        print("\n" + "=" * 70)
        print("FINAL STATE")
        print("=" * 70)
        print(f"  Registers: {self.dump_registers()}")
        print(f"  PC: {self.get_pc()}")
        print(f"  Cycles: {self.get_cycle_count()}")
        print(f"  Halted: {self.is_halted()}")

    def get_summary(self) -> Dict:
        """Get execution summary.

        Returns:
            Dictionary with execution statistics and final state
        """
        return {
            "cycles": self.get_cycle_count(),
            "halted": self.is_halted(),
            "registers": self.dump_registers(),
            "pc": self.get_pc(),
            "trace_length": len(self.trace),
            "skipped": sum(1 for e in self.trace if e.skipped),
            "toggles": sum(1 for e in self.trace if e.toggled is not None),
        }
