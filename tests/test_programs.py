"""Integration tests for example programs."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from assembunny import RegisterMachine, parse_program

PROGRAMS_DIR = Path(__file__).parent.parent / "programs"


class TestMonorailProgram:
    """Example from the monorail puzzle: no tgl, one skipping jnz."""

    SOURCE = """
        cpy 41 a
        inc a
        inc a
        dec a
        jnz a 2
        dec a
    """

    def test_result(self):
        """a = 41 + 2 - 1 and the last dec is jumped over."""
        machine = RegisterMachine.from_source(self.SOURCE)
        machine.run_to_halt()

        assert machine.get_register("a") == 42
        assert machine.is_halted() is True
        assert machine.get_pc() == 6

    def test_cycles(self):
        machine = RegisterMachine.from_source(self.SOURCE)
        machine.run_to_halt()
        assert machine.get_cycle_count() == 5


class TestToggleProgram:
    """Example from the safe-cracking puzzle."""

    SOURCE = """
        cpy 2 a
        tgl a
        tgl a
        tgl a
        cpy 1 a
        dec a
        dec a
    """

    @pytest.fixture
    def machine(self):
        return RegisterMachine.from_source(self.SOURCE, trace=True)

    def test_result(self, machine):
        machine.run_to_halt()
        assert machine.get_register("a") == 3

    def test_final_listing(self, machine):
        """Third tgl became inc, cpy 1 a became jnz 1 a."""
        machine.run_to_halt()
        assert machine.listing() == [
            "cpy 2 a",
            "tgl a",
            "tgl a",
            "inc a",
            "jnz 1 a",
            "dec a",
            "dec a",
        ]

    def test_trace(self, machine):
        machine.run_to_halt()
        trace = machine.get_trace()
        assert [entry.instruction for entry in trace] == [
            "cpy 2 a",
            "tgl a",
            "tgl a",
            "inc a",
            "jnz 1 a",
        ]
        assert [entry.toggled for entry in trace] == [None, 3, 4, None, None]


class TestMultiplyProgram:
    """Nested loop computing a += b * d."""

    SOURCE = """
        cpy b c
        inc a
        dec c
        jnz c -2
        dec d
        jnz d -5
    """

    @pytest.mark.parametrize("b,d,expected", [(3, 4, 12), (6, 7, 42), (1, 1, 1)])
    def test_product(self, b, d, expected):
        machine = RegisterMachine.from_source(self.SOURCE, registers={"b": b, "d": d})
        machine.run_to_halt()
        assert machine.get_register("a") == expected
        assert machine.get_register("c") == 0
        assert machine.get_register("d") == 0


class TestRegisterOffsets:
    """jnz and tgl offsets read from registers."""

    def test_jnz_register_offset(self):
        machine = RegisterMachine.from_source("cpy 2 b\njnz 1 b\ninc a\ninc a")
        machine.run_to_halt()
        assert machine.get_register("a") == 1

    def test_countdown_with_toggled_loop_exit(self):
        """Loop body toggles the closing jnz into a cpy on the way out."""
        machine = RegisterMachine.from_source("""
            cpy 3 b
            inc a
            dec b
            cpy b c
            jnz b 2
            tgl 1
            jnz 1 -5
        """)
        # Three passes; on the last one tgl 1 turns the jnz into cpy 1 -5,
        # which is skipped, and the program falls off the end.
        machine.run_to_halt()
        assert machine.dump_registers() == {"a": 3, "b": 0, "c": 0, "d": 0}
        assert machine.listing()[6] == "cpy 1 -5"


class TestDeterminism:
    """Identical programs and registers give identical results."""

    SOURCE = """
        cpy 2 a
        tgl a
        tgl a
        tgl a
        cpy 1 a
        dec a
        dec a
    """

    def test_two_runs_agree(self):
        first = RegisterMachine(parse_program(self.SOURCE), registers={"b": 5})
        second = RegisterMachine(parse_program(self.SOURCE), registers={"b": 5})
        assert first.run_to_halt() == second.run_to_halt()
        assert first.get_cycle_count() == second.get_cycle_count()
        assert first.listing() == second.listing()

    def test_shared_program_list_is_not_rewritten(self):
        """Machines copy the program, so one parsed list can be run repeatedly."""
        program = parse_program(self.SOURCE)
        original = list(program)

        first = RegisterMachine(program).run_to_halt()
        second = RegisterMachine(program).run_to_halt()

        assert first == second == {"a": 3, "b": 0, "c": 0, "d": 0}
        assert program == original


class TestProgramFromFile:
    """Test loading the bundled programs."""

    def test_monorail_file(self):
        machine = RegisterMachine.from_source((PROGRAMS_DIR / "monorail_example.bunny").read_text())
        machine.run_to_halt()
        assert machine.get_register("a") == 42

    def test_toggle_file(self):
        machine = RegisterMachine.from_source((PROGRAMS_DIR / "toggle_example.bunny").read_text())
        machine.run_to_halt()
        assert machine.get_register("a") == 3

    def test_multiply_file(self):
        machine = RegisterMachine.from_source(
            (PROGRAMS_DIR / "multiply.bunny").read_text(),
            registers={"b": 6, "d": 7},
        )
        machine.run_to_halt()
        assert machine.get_register("a") == 42
