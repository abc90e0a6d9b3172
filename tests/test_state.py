"""Tests for MachineState and RegisterId."""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from assembunny.decode import parse_program
from assembunny.state import MachineState, RegisterId, create_initial_state


class TestRegisterId:
    """Test the register letter mapping."""

    def test_from_name(self):
        """Each letter maps to its own register-file slot."""
        assert RegisterId.from_name("a") is RegisterId.A
        assert RegisterId.from_name("d") is RegisterId.D
        assert [reg.value for reg in RegisterId] == [0, 1, 2, 3]

    def test_from_name_case_insensitive(self):
        assert RegisterId.from_name("B") is RegisterId.B

    def test_from_name_invalid(self):
        """Letters outside a-d raise KeyError."""
        with pytest.raises(KeyError):
            RegisterId.from_name("e")

    def test_from_name_non_string(self):
        """Non-string keys raise KeyError too."""
        with pytest.raises(KeyError):
            RegisterId.from_name(0)

    def test_letter(self):
        assert RegisterId.C.letter == "c"


class TestMachineStateCreation:
    """Test MachineState initialization and defaults."""

    def test_default_state(self):
        """Default state has zeroed registers and an empty program."""
        state = MachineState()
        assert state.pc == 0
        assert state.cycle_count == 0
        assert state.registers == [0, 0, 0, 0]
        assert state.program == []

    def test_create_initial_state(self):
        """create_initial_state loads program and initial registers."""
        program = parse_program("inc a\ndec b")
        state = create_initial_state(program, {"a": 7, "C": 1}, pc=1)
        assert state.program == program
        assert state.pc == 1
        assert state.dump_registers() == {"a": 7, "b": 0, "c": 1, "d": 0}

    def test_create_initial_state_unknown_register(self):
        with pytest.raises(KeyError):
            create_initial_state([], {"x": 1})

    def test_create_initial_state_non_string_register(self):
        with pytest.raises(KeyError, match="Invalid register: 0"):
            create_initial_state([], {0: 1})

    def test_create_initial_state_copies_program(self):
        """The state owns its own program list."""
        program = parse_program("inc a")
        state = create_initial_state(program)
        assert state.program == program
        assert state.program is not program


class TestMachineStateHalted:
    """halted is derived from pc and program length."""

    @pytest.fixture
    def state(self):
        return create_initial_state(parse_program("inc a\ninc a\ninc a"))

    @pytest.mark.parametrize("pc,halted", [
        (-1, True),
        (0, False),
        (2, False),
        (3, True),
        (10, True),
    ])
    def test_halted_iff_pc_out_of_range(self, state, pc, halted):
        state.pc = pc
        assert state.halted is halted

    def test_empty_program_is_halted(self):
        assert MachineState().halted is True


class TestMachineStateAccessors:
    """Test register accessors."""

    def test_get_set_register(self):
        state = MachineState()
        state.set_register("c", -12)
        assert state.get_register("c") == -12
        assert state.get_register(RegisterId.C) == -12
        assert state.registers[2] == -12

    def test_no_clamping(self):
        """Registers are plain Python ints."""
        state = MachineState()
        state.set_register("a", 2**40)
        assert state.get_register("a") == 2**40

    def test_get_register_invalid(self):
        with pytest.raises(KeyError):
            MachineState().get_register("R0")

    def test_dump_registers_is_copy(self):
        """Modifying the dump doesn't affect state."""
        state = MachineState()
        state.set_register("a", 1)
        regs = state.dump_registers()
        regs["a"] = 999
        assert state.get_register("a") == 1


class TestMachineStateSnapshot:
    """Test state snapshot for tracing."""

    def test_snapshot_is_copy(self):
        state = create_initial_state(parse_program("inc a"), {"a": 42})
        snapshot = state.snapshot()

        assert snapshot == {
            "registers": {"a": 42, "b": 0, "c": 0, "d": 0},
            "pc": 0,
            "halted": False,
            "cycle_count": 0,
        }

        snapshot["registers"]["a"] = 999
        assert state.get_register("a") == 42

    def test_str(self):
        state = MachineState()
        assert str(state) == "[Cycle 0] PC=0 a=0 b=0 c=0 d=0 HALTED"
