"""Command line entry point: run a program file and optionally dump CPU state."""

from __future__ import annotations

import sys

from simplevm.cpu import Cpu, PrintMode, StackError, read_program

USAGE = "\nSimpleVirtualMachine [file] [-rsf | -m | -all]"

_MODES = {
    "-rsf": PrintMode.REGS | PrintMode.FLAGS | PrintMode.STACK,
    "-m": PrintMode.MEM,
    "-all": PrintMode.ALL,
}


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    path = args[0] if args else ""
    option = args[1] if len(args) > 1 else None

    try:
        program = read_program(path) if path else None
    except OSError:
        program = None
    except ValueError as exc:
        print(f"Invalid program ({path}): {exc}")
        return 1
    if program is None:
        print(f"Cannot find file ({path or 'null'})")
        return 1

    cpu = Cpu()
    cpu.load_program(program)
    try:
        cpu.run()
    except StackError as exc:
        print(exc)
        return 1

    if option in _MODES:
        sys.stdout.write(cpu.format_info(_MODES[option]))
    elif option == "-h":
        print(USAGE)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())