# simplevm

A small register-based virtual machine. Programs are plain text files of
hexadecimal instruction words separated by whitespace. They are loaded at
address `0x200` and run until a `HALT` instruction is reached.

## Installation

    pip install .

## Running a program

    simplevm program.txt -all

The same command is available as `python -m simplevm.cli program.txt -all`.

The second argument chooses what is printed after the program halts:

| Option | Output                                   |
|--------|------------------------------------------|
| `-rsf` | registers, stack and flags               |
| `-m`   | the loaded program memory                |
| `-all` | memory, registers, stack and flags       |
| `-h`   | a short usage line                       |

With no second argument nothing is printed beyond the program's own output.
If the file cannot be read the command prints `Cannot find file (...)`; if it
holds a token that is not hexadecimal it prints `Invalid program (...)`. Both
return exit status 1, as does a stack overflow or underflow while running.

## Machine model

- Six 8-bit registers `R0`–`R5`. Arithmetic results wrap to one byte.
  `R5` picks the system call used by `SCALL`: `0` writes `R0` as a character,
  `1` reads one character into `R0`.
- A 28-entry stack of bytes.
- Four flags: equal (`e`), overflow (`o`), zero (`z`) and logic (`l`).
  Arithmetic, `MOV`, `INC`, `DEC` and `SHIFT` set `z` from the destination
  register and clear `e` and `l`; `CMP` sets `e`; `AND`, `OR` and `XOR` set
  `l`. Every `JMP` clears the flags after it is evaluated.
- 4096 words of memory; the program counter starts at `0x200`.

Each instruction word holds the opcode in bits 16 and up, a sub-operation in
bits 12–15, the destination register in bits 8–11 and an operand in the low
byte. For two-register forms (sub-operation `1`) the source register is the
upper nibble of the low byte. Jumps go to the address in the low 12 bits.
The opcodes, in order from zero, are: `HALT`, `MOV`, `ADD`, `SUB`, `MUL`,
`DIV`, `INC`, `DEC`, `AND`, `OR`, `XOR`, `SHIFT`, `JMP`, `STK`, `CMP` and
`SCALL`. Words with a larger opcode are skipped.

`HALT` sub-operations: `0` stops, `1` clears the flags, `2` clears the
screen. `STK` sub-operations: `0` pushes the operand, `1` pushes the
destination register, `2` pops into the destination register. `JMP`
sub-operations `0`–`8` are: always, `e`, not `e`, `o`, not `o`, `z`, not `z`,
`l`, not `l`.

A small program that prints `A`:

    10041 10500 F0000 00000

## Using it from Python

```python
import io
from simplevm.cpu import Cpu, PrintMode

out = io.StringIO()
cpu = Cpu(stdin=io.StringIO(), stdout=out)
cpu.load_program([0x1010A, 0x20105, 0x00000])  # mov R1,10; add R1,5; halt
cpu.run()
assert cpu.regs[1] == 15
print(cpu.format_info(PrintMode.REGS | PrintMode.FLAGS))
```

`read_program(path)` reads a program file into a list of words,
`Cpu.step()` executes one instruction and `Cpu.run()` runs until halt.
`format_regs`, `format_flags`, `format_stack`, `format_memory` and
`format_info(mode)` return the state dumps as strings.

A push onto a full stack or a pop from an empty one raises `StackError`.
`load_program` raises `ValueError` for a program that does not fit in memory,
and dividing by a zero operand raises `ZeroDivisionError`.

## What it does not do

There is no assembler or disassembler: programs are written directly as
hexadecimal words.