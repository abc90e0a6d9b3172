"""Assembunny Interactive Demo.

A Gradio web interface for running and inspecting assembunny programs.

Usage:
    cd /path/to/assembunny
    python demo/gradio_app.py

Features:
    - Write or load assembunny programs
    - Set initial registers and a cycle budget
    - See step-by-step execution trace
    - See the final listing after tgl has rewritten it
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import gradio as gr
from assembunny import CycleLimitExceeded, ProgramParseError, RegisterMachine


# =============================================================================
# Example Programs
# =============================================================================

EXAMPLE_PROGRAMS = {
    "Monorail (a = 42)": """cpy 41 a
inc a
inc a
dec a
jnz a 2
dec a""",

    "Toggle (a = 3)": """cpy 2 a
tgl a
tgl a
tgl a
cpy 1 a
dec a
dec a""",

    "Multiply b*d (set b, d)": """cpy b c
inc a
dec c
jnz c -2
dec d
jnz d -5""",

    "Custom": ""
}


# =============================================================================
# Execution Functions
# =============================================================================

def initial_registers(a, b, c, d) -> dict:
    """Register inputs as ints; an empty Number field arrives as None."""
    return {letter: int(value or 0) for letter, value in zip("abcd", (a, b, c, d))}


def run_program(program: str, a: int, b: int, c: int, d: int, max_cycles: int) -> tuple:
    """Execute an assembunny program and return results.

    Args:
        program: Assembunny source code
        a, b, c, d: Initial register values
        max_cycles: Maximum execution cycles

    Returns:
        Tuple of (summary_text, registers_text, trace_text, listing_text)
    """
    if not program.strip():
        return "Error: No program provided", "", "", ""

    registers = initial_registers(a, b, c, d)
    try:
        machine = RegisterMachine.from_source(program, registers=registers, trace=True)
    except ProgramParseError as e:
        return f"Parse error: {e}", "", "", ""

    try:
        machine.run(int(max_cycles))
    except CycleLimitExceeded as e:
        error_msg = str(e)
    else:
        error_msg = None

    # Format summary
    summary = machine.get_summary()
    summary_lines = [
        "EXECUTION SUMMARY",
        "=" * 40,
        f"Cycles: {summary['cycles']}",
        f"Halted: {'Yes' if summary['halted'] else 'No'}",
        f"Toggles: {summary['toggles']}",
        f"Skipped: {summary['skipped']}",
    ]
    if error_msg:
        summary_lines.append(f"\nRuntime: {error_msg}")
    summary_text = "\n".join(summary_lines)

    # Format registers
    reg_lines = [
        "FINAL REGISTERS",
        "=" * 30,
    ]
    for reg, value in summary["registers"].items():
        marker = " *" if value != registers[reg] else ""
        reg_lines.append(f"  {reg}: {value:>10}{marker}")
    registers_text = "\n".join(reg_lines)

    # Format trace
    trace = machine.get_trace()
    trace_lines = [
        "EXECUTION TRACE",
        "=" * 60,
    ]
    for entry in trace[:100]:  # Limit to 100 entries
        status = " (skipped)" if entry.skipped else ""
        trace_lines.append(f"[{entry.cycle:>4}] {entry.address:>3}: {entry.instruction}{status}")

        pre_regs = entry.pre_state["registers"]
        post_regs = entry.post_state["registers"]
        changes = [
            f"{reg}: {pre_regs[reg]} -> {post_regs[reg]}"
            for reg in pre_regs
            if pre_regs[reg] != post_regs[reg]
        ]
        if changes:
            trace_lines.append(f"       {', '.join(changes)}")
        if entry.toggled is not None:
            trace_lines.append(f"       toggled {entry.toggled}")

    if len(trace) > 100:
        trace_lines.append(f"\n... ({len(trace) - 100} more entries)")
    trace_text = "\n".join(trace_lines)

    listing_text = "\n".join(
        f"{address:>3}: {line}" for address, line in enumerate(machine.listing())
    )

    return summary_text, registers_text, trace_text, listing_text


def load_example(example_name: str) -> str:
    """Load an example program."""
    return EXAMPLE_PROGRAMS.get(example_name, "")


# =============================================================================
# Gradio Interface
# =============================================================================

def create_demo():
    """Create and return the Gradio demo interface."""

    with gr.Blocks(title="Assembunny Demo", theme=gr.themes.Soft()) as demo:
        gr.Markdown("""
        # Assembunny Register Machine

        Four registers, five instructions, and a `tgl` that rewrites the
        program while it runs.
        """)

        with gr.Row():
            with gr.Column(scale=2):
                gr.Markdown("### Program")

                example_dropdown = gr.Dropdown(
                    choices=list(EXAMPLE_PROGRAMS.keys()),
                    value="Toggle (a = 3)",
                    label="Load Example"
                )

                program_input = gr.Textbox(
                    value=EXAMPLE_PROGRAMS["Toggle (a = 3)"],
                    label="Source Code",
                    lines=15,
                    placeholder="Enter assembunny code here..."
                )

                gr.Markdown("### Initial Registers")

                with gr.Row():
                    reg_inputs = [
                        gr.Number(value=0, precision=0, label=letter)
                        for letter in "abcd"
                    ]

                max_cycles = gr.Slider(
                    minimum=100,
                    maximum=1000000,
                    value=100000,
                    step=100,
                    label="Max Cycles"
                )

                run_button = gr.Button("Run Program", variant="primary")

            with gr.Column(scale=3):
                with gr.Row():
                    summary_output = gr.Textbox(
                        label="Summary",
                        lines=8,
                        interactive=False
                    )
                    registers_output = gr.Textbox(
                        label="Final Registers",
                        lines=8,
                        interactive=False
                    )

                listing_output = gr.Textbox(
                    label="Final Listing",
                    lines=8,
                    interactive=False
                )

                trace_output = gr.Textbox(
                    label="Execution Trace",
                    lines=20,
                    interactive=False
                )

        with gr.Accordion("Instruction Set", open=False):
            gr.Markdown("""
            | Instruction | Description | toggles to |
            |-------------|-------------|------------|
            | `cpy x y` | Copy x (integer or register) into register y | `jnz x y` |
            | `inc x` | Increase register x by one | `dec x` |
            | `dec x` | Decrease register x by one | `inc x` |
            | `jnz x y` | Jump y away if x is not zero | `cpy x y` |
            | `tgl x` | Toggle the instruction x away | `inc x` |

            **Registers**: a, b, c, d
            **Halt**: when the program counter leaves the program
            """)

        example_dropdown.change(
            fn=load_example,
            inputs=[example_dropdown],
            outputs=[program_input]
        )

        run_button.click(
            fn=run_program,
            inputs=[program_input, *reg_inputs, max_cycles],
            outputs=[summary_output, registers_output, trace_output, listing_output]
        )

    return demo


# =============================================================================
# Main
# =============================================================================

if __name__ == "__main__":
    demo = create_demo()
    demo.launch(
        share=False,
        server_name="0.0.0.0",
        server_port=7861,
        show_error=True
    )
