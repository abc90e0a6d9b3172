#!/usr/bin/env python3
"""Assembunny Command Line Interface.

Run assembunny programs on the register machine.

Usage:
    python main.py --program programs/monorail_example.bunny
    python main.py --program input.txt -c 1
    python main.py --program input.txt -a 7 --max-cycles 1000000
"""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from assembunny import CycleLimitExceeded, ProgramParseError, RegisterMachine


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Assembunny register machine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Run the monorail example
    python main.py --program programs/monorail_example.bunny

    # Initialize register c to 1 (ignition key)
    python main.py --program input.txt -c 1

    # Keypad entry of 7 eggs in register a, with full trace output
    python main.py --program programs/toggle_example.bunny -a 7 --trace

    # Run inline assembunny
    python main.py --inline "cpy 41 a; inc a"
        """
    )

    parser.add_argument(
        "--program", "-p",
        type=str,
        help="Path to assembunny program file"
    )
    parser.add_argument(
        "--inline", "-i",
        type=str,
        help="Inline assembunny (separate instructions with ;)"
    )
    for letter in "abcd":
        parser.add_argument(
            f"-{letter}",
            type=int,
            default=0,
            dest=letter,
            metavar="INT",
            help=f"Initial value of register {letter}. Default: 0"
        )
    parser.add_argument(
        "--pc",
        type=int,
        default=0,
        help="Initial program counter. Default: 0"
    )
    parser.add_argument(
        "--max-cycles",
        type=int,
        default=None,
        help="Maximum execution cycles (safety limit). Default: unbounded"
    )
    parser.add_argument(
        "--trace", "-t",
        action="store_true",
        help="Print full execution trace"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Minimal output (register a only)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log toggles and skipped instructions"
    )
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.program and not args.inline:
        parser.error("Either --program or --inline is required")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Load program
    if args.program:
        program_path = Path(args.program)
        if not program_path.exists():
            print(f"Error: Program file not found: {args.program}")
            return 1
        source = program_path.read_text()
        if not args.quiet:
            print(f"Loading program: {args.program}")
    else:
        source = args.inline.replace(";", "\n")
        if not args.quiet:
            print("Running inline assembunny")

    registers = {letter: getattr(args, letter) for letter in "abcd"}
    try:
        machine = RegisterMachine.from_source(
            source, registers=registers, pc=args.pc, trace=args.trace
        )
    except ProgramParseError as e:
        print(f"Parse error: {e}")
        return 1

    if not args.quiet:
        print("-" * 60)
        print("Executing...")
        print("-" * 60)

    status = 0
    try:
        machine.run(args.max_cycles)
    except CycleLimitExceeded as e:
        print(f"Execution error: {e}")
        status = 1

    # Output
    if args.trace:
        machine.print_trace()
    elif not args.quiet:
        print()
        summary = machine.get_summary()
        print(f"Cycles: {summary['cycles']}")
        print(f"Halted: {summary['halted']}")
        print(f"Registers: {summary['registers']}")
    else:
        print(machine.get_register("a"))

    return status


if __name__ == "__main__":
    sys.exit(main())
