import pytest

from simplevm.cli import main

PROGRAM = "10001\n10102\n11200\n21210\n00000\n"


@pytest.fixture
def program_file(tmp_path):
    path = tmp_path / "program.txt"
    path.write_text(PROGRAM)
    return path


def test_rsf_prints_registers_stack_and_flags(program_file, capsys):
    assert main([str(program_file), "-rsf"]) == 0
    out = capsys.readouterr().out
    assert "===REGS===" in out
    assert "STACK: " in out
    assert "FLAGS: " in out
    assert "MEMORY" not in out


def test_m_prints_memory_only(program_file, capsys):
    assert main([str(program_file), "-m"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("=======MEMORY=======")
    assert "===REGS===" not in out
    assert out.count("mem[") == len(PROGRAM.split())


def test_all_prints_every_section_in_order(program_file, capsys):
    assert main([str(program_file), "-all"]) == 0
    out = capsys.readouterr().out
    assert out.index("MEMORY") < out.index("REGS") < out.index("STACK") < out.index("FLAGS")


def test_help_prints_usage(program_file, capsys):
    assert main([str(program_file), "-h"]) == 0
    assert "SimpleVirtualMachine [file] [-rsf | -m | -all]" in capsys.readouterr().out


def test_no_option_prints_nothing(program_file, capsys):
    assert main([str(program_file)]) == 0
    assert capsys.readouterr().out == ""


def test_missing_file(tmp_path, capsys):
    path = tmp_path / "missing.txt"
    assert main([str(path), "-m"]) == 1
    assert capsys.readouterr().out.strip() == f"Cannot find file ({path})"


def test_no_arguments_reports_null(capsys):
    assert main([]) == 1
    assert "Cannot find file (null)" in capsys.readouterr().out


def test_program_output_then_dump(tmp_path, capsys):
    words = [0x10000 | ord("H"), 0xF0000, 0x10000 | ord("i"), 0xF0000, 0]
    path = tmp_path / "hi.txt"
    path.write_text(" ".join(f"{w:05X}" for w in words))
    assert main([str(path), "-rsf"]) == 0
    assert capsys.readouterr().out.startswith("Hi\n===REGS===")


def test_stack_overflow_reports_error(tmp_path, capsys):
    path = tmp_path / "overflow.txt"
    path.write_text("D0001\n" * 29 + "00000\n")
    assert main([str(path), "-rsf"]) == 1
    assert "Out of stack range!" in capsys.readouterr().out


def test_invalid_program_text(tmp_path, capsys):
    path = tmp_path / "bad.txt"
    path.write_text("10001 zz\n")
    assert main([str(path)]) == 1
    assert str(path) in capsys.readouterr().out