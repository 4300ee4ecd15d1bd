"""Virtual CPU: memory, registers, flags, stack and the instruction interpreter."""

from __future__ import annotations

import operator
import os
import subprocess
import sys
from dataclasses import dataclass
from enum import IntEnum, IntFlag
from pathlib import Path
from typing import Callable, Iterable, TextIO

PROGRAM_ADDRESS = 0x200
MEM_SIZE = 4 * 1024
REG_COUNT = 6
STACK_DEPTH = 28

R0 = 0  # value register for system calls
R5 = 5  # system call selector

_BYTE = 0xFF
_WORD = 0xFFFFFFFF


class Opcode(IntEnum):
    """Instruction families, selected by the bits above bit 16 of a word."""

    HALT = 0
    MOV = 1
    ADD = 2
    SUB = 3
    MUL = 4
    DIV = 5
    INC = 6
    DEC = 7
    AND = 8
    OR = 9
    XOR = 10
    SHIFT = 11
    JMP = 12
    STK = 13
    CMP = 14
    SCALL = 15


class PrintMode(IntFlag):
    """Sections of the CPU state dump."""

    MEM = 0b0001
    STACK = 0b0010
    FLAGS = 0b0100
    REGS = 0b1000
    ALL = MEM | STACK | FLAGS | REGS


class StackError(RuntimeError):
    """Raised when a push or pop goes outside the stack."""


@dataclass
class Flags:
    """CPU condition flags: equal, overflow, zero and logic."""

    e: bool = False
    o: bool = False
    z: bool = True
    l: bool = False  # noqa: E741

    def clear(self) -> None:
        """Reset the flags to their power-on state."""
        self.e = False
        self.o = False
        self.z = True
        self.l = False


@dataclass(frozen=True)
class Instruction:
    """A fetched word split into its operand fields."""

    op_code: int = 0
    nnnn: int = 0
    nnn: int = 0
    nn: int = 0
    n: int = 0

    @classmethod
    def decode(cls, word: int) -> "Instruction":
        """Split a 32-bit word into its fields."""
        word &= _WORD
        return cls(
            op_code=word,
            nnnn=(word >> 12) & 0xF,
            nnn=word & 0xFFF,
            nn=word & 0xFF,
            n=word & 0x7,
        )

    @property
    def opcode(self) -> int:
        return self.op_code >> 16

    @property
    def target(self) -> int:
        """Index of the destination register."""
        return (self.nnn >> 8) & 0xF

    @property
    def source(self) -> int:
        """Index of the source register, or the shift amount."""
        return self.nn >> 4


def read_program(path: str | os.PathLike[str]) -> list[int]:
    """Read whitespace-separated hexadecimal words from a file."""
    text = Path(path).read_text()
    return [int(token, 16) & _WORD for token in text.split()]


_JUMP_CONDITIONS: dict[int, Callable[[Flags], bool]] = {
    0: lambda f: True,
    1: lambda f: f.e,
    2: lambda f: not f.e,
    3: lambda f: f.o,
    4: lambda f: not f.o,
    5: lambda f: f.z,
    6: lambda f: not f.z,
    7: lambda f: f.l,
    8: lambda f: not f.l,
}


class Cpu:
    """A small 8-bit register machine with word-addressed program memory."""

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.is_running = True
        self.is_printing = False
        self.program_size = 0
        self.memory = [0] * MEM_SIZE
        self.regs = [0] * REG_COUNT
        self.stack = [0] * STACK_DEPTH
        self.stack_pointer = -1
        self.pc = PROGRAM_ADDRESS
        self.instr = Instruction()
        self.flags = Flags()

    # --- program control -------------------------------------------------

    def load_program(self, program: Iterable[int]) -> None:
        """Copy words into memory starting at the program address."""
        words = [word & _WORD for word in program]
        if len(words) > MEM_SIZE - PROGRAM_ADDRESS:
            raise ValueError(
                f"program of {len(words)} words does not fit in memory"
            )
        self.memory[PROGRAM_ADDRESS:PROGRAM_ADDRESS + len(words)] = words
        self.program_size = len(words)

    def fetch(self) -> Instruction:
        """Read the word at the program counter and advance it."""
        self.instr = Instruction.decode(self.memory[self.pc])
        self.pc += 1
        return self.instr

    def step(self) -> None:
        """Fetch and execute one instruction."""
        ins = self.fetch()
        try:
            opcode = Opcode(ins.opcode)
        except ValueError:
            return
        self._HANDLERS[opcode](self, ins)

    def run(self) -> None:
        """Execute instructions until the machine halts."""
        while self.is_running:
            self.step()

    # --- flags and stack -------------------------------------------------

    def clear_flags(self) -> None:
        self.flags.clear()

    def update_flags(self) -> None:
        """Set flags from the destination register of the current instruction."""
        reg = self.regs[self.instr.target]
        self.flags.z = reg == 0
        self.flags.o = (_BYTE - reg) == 255
        self.flags.e = False
        self.flags.l = False

    def push(self, value: int) -> None:
        if self.stack_pointer + 1 >= STACK_DEPTH:
            raise StackError("Out of stack range!")
        self.stack_pointer += 1
        self.stack[self.stack_pointer] = value & _BYTE

    def pop(self) -> int:
        if self.stack_pointer < 0:
            raise StackError("Out of stack range!")
        value = self.stack[self.stack_pointer]
        self.stack[self.stack_pointer] = 0
        self.stack_pointer -= 1
        return value

    # --- state dumps -----------------------------------------------------

    def format_regs(self) -> str:
        lines = ["===REGS==="]
        lines.extend(f"R[{i}] = {value:03d}" for i, value in enumerate(self.regs))
        lines.append("==========")
        return "\n".join(lines) + "\n"

    def format_flags(self) -> str:
        f = self.flags
        return (
            f"FLAGS: Equal(e)={int(f.e)} Zero(z)={int(f.z)} "
            f"Overflow(o)={int(f.o)} Logic(l)={int(f.l)}\n"
        )

    def format_stack(self) -> str:
        return "STACK: " + "".join(f"{value:03d} " for value in self.stack) + "\n"

    def format_memory(self) -> str:
        lines = ["=======MEMORY======="]
        end = PROGRAM_ADDRESS + self.program_size
        lines.extend(
            f"mem[0x{addr:02X}] = 0x{self.memory[addr]:05X}"
            for addr in range(PROGRAM_ADDRESS, end)
        )
        lines.append("====================")
        return "\n".join(lines) + "\n"

    def format_info(self, mode: int) -> str:
        """Render the requested sections; ends any pending program output line."""
        mode = PrintMode(mode)
        parts = []
        if self.is_printing:
            parts.append("\n")
        if mode & PrintMode.MEM:
            parts.append(self.format_memory())
        if mode & PrintMode.REGS:
            parts.append(self.format_regs())
        if mode & PrintMode.STACK:
            parts.append(self.format_stack())
        if mode & PrintMode.FLAGS:
            parts.append(self.format_flags())
        self.is_printing = False
        return "".join(parts)

    # --- instruction handlers --------------------------------------------

    def _operand(self, ins: Instruction) -> int | None:
        if ins.nnnn == 0:
            return ins.nn
        if ins.nnnn == 1:
            return self.regs[ins.source]
        return None

    def _halt(self, ins: Instruction) -> None:
        if ins.nnnn == 0:
            self.is_running = False
        elif ins.nnnn == 1:
            self.clear_flags()
        elif ins.nnnn == 2:
            self._clear_screen()

    def _clear_screen(self) -> None:
        if os.name == "nt":
            subprocess.run("cls", shell=True, check=False)
        else:
            self.stdout.write("\033[2J\033[H")
            self.stdout.flush()

    def _arithmetic(self, ins: Instruction, fn: Callable[[int, int], int]) -> None:
        value = self._operand(ins)
        if value is not None:
            self.regs[ins.target] = fn(self.regs[ins.target], value) & _BYTE
        self.update_flags()

    def _mov(self, ins: Instruction) -> None:
        self._arithmetic(ins, lambda _, value: value)

    def _add(self, ins: Instruction) -> None:
        self._arithmetic(ins, operator.add)

    def _sub(self, ins: Instruction) -> None:
        self._arithmetic(ins, operator.sub)

    def _mul(self, ins: Instruction) -> None:
        self._arithmetic(ins, operator.mul)

    def _div(self, ins: Instruction) -> None:
        self._arithmetic(ins, operator.floordiv)

    def _inc(self, ins: Instruction) -> None:
        self.regs[ins.target] = (self.regs[ins.target] + 1) & _BYTE
        self.update_flags()

    def _dec(self, ins: Instruction) -> None:
        self.regs[ins.target] = (self.regs[ins.target] - 1) & _BYTE
        self.update_flags()

    def _logic(self, ins: Instruction, fn: Callable[[int, int], object]) -> None:
        value = self._operand(ins)
        if value is not None:
            self.flags.l = bool(fn(self.regs[ins.target], value))

    def _and(self, ins: Instruction) -> None:
        self._logic(ins, lambda a, b: a and b)

    def _or(self, ins: Instruction) -> None:
        self._logic(ins, lambda a, b: a or b)

    def _xor(self, ins: Instruction) -> None:
        self._logic(ins, operator.xor)

    def _shift(self, ins: Instruction) -> None:
        reg = self.regs[ins.target]
        if ins.nnnn == 0:
            self.regs[ins.target] = (reg << ins.source) & _BYTE
        elif ins.nnnn == 1:
            self.regs[ins.target] = reg >> ins.source
        self.update_flags()

    def _jmp(self, ins: Instruction) -> None:
        condition = _JUMP_CONDITIONS.get(ins.nnnn)
        if condition is not None and condition(self.flags):
            self.pc = ins.nnn
        self.clear_flags()

    def _cmp(self, ins: Instruction) -> None:
        value = self._operand(ins)
        if value is not None:
            self.flags.e = self.regs[ins.target] == value

    def _stk(self, ins: Instruction) -> None:
        if ins.nnnn == 0:
            self.push(ins.nn)
        elif ins.nnnn == 1:
            self.push(self.regs[ins.target])
        elif ins.nnnn == 2:
            self.regs[ins.target] = self.pop()

    def _scall(self, ins: Instruction) -> None:
        if self.regs[R5] == 0:
            self.is_printing = True
            self.stdout.write(chr(self.regs[R0]))
            self.stdout.flush()
        if self.regs[R5] == 1:
            char = self.stdin.read(1)
            if char:
                self.regs[R0] = ord(char) & _BYTE

    _HANDLERS: dict[Opcode, Callable[["Cpu", Instruction], None]] = {
        Opcode.HALT: _halt,
        Opcode.MOV: _mov,
        Opcode.ADD: _add,
        Opcode.SUB: _sub,
        Opcode.MUL: _mul,
        Opcode.DIV: _div,
        Opcode.INC: _inc,
        Opcode.DEC: _dec,
        Opcode.AND: _and,
        Opcode.OR: _or,
        Opcode.XOR: _xor,
        Opcode.SHIFT: _shift,
        Opcode.JMP: _jmp,
        Opcode.STK: _stk,
        Opcode.CMP: _cmp,
        Opcode.SCALL: _scall,
    }