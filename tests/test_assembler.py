"""
Assembler Tests for the Hack assembler.

Tests the encoder tables, the symbol table, the two passes and complete
programs against known-good Hack machine code from the nand2tetris
course materials.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from hack_assembler import assemble_source
from hack_assembler.assembler import Assembler, assemble, first_pass, second_pass
from hack_assembler.encoder import Jump, Register, encode_address, encode_compute
from hack_assembler.errors import (
    AddressOutOfRange, AssemblerError, DuplicateDestRegister, DuplicateLabel,
    MultipleAssignment, UnknownComputation,
)
from hack_assembler.output import to_bits, to_hack_text
from hack_assembler.parser import parse_source
from hack_assembler.symbols import PREDEFINED_SYMBOLS, SymbolTable


def _bits(source: str) -> list:
    """Assemble source and return words as 16-char bit strings."""
    return [to_bits(w) for w in assemble(source)]


class TestEncoder:
    """Verify each table row against the Hack instruction set."""

    COMP = {
        '0':   '0101010', '1':   '0111111', '-1':  '0111010',
        'D':   '0001100', 'A':   '0110000', 'M':   '1110000',
        '!D':  '0001101', '!A':  '0110001', '!M':  '1110001',
        '-D':  '0001111', '-A':  '0110011', '-M':  '1110011',
        'D+1': '0011111', 'A+1': '0110111', 'M+1': '1110111',
        'D-1': '0001110', 'A-1': '0110010', 'M-1': '1110010',
        'D+A': '0000010', 'D+M': '1000010',
        'D-A': '0010011', 'D-M': '1010011',
        'A-D': '0000111', 'M-D': '1000111',
        'D&A': '0000000', 'D&M': '1000000',
        'D|A': '0010101', 'D|M': '1010101',
    }

    JUMP = {
        None: '000', Jump.JGT: '001', Jump.JEQ: '010', Jump.JGE: '011',
        Jump.JLT: '100', Jump.JNE: '101', Jump.JLE: '110', Jump.JMP: '111',
    }

    def test_comp_table(self):
        for comp, bits in self.COMP.items():
            result = to_bits(encode_compute(comp))
            assert result == '111' + bits + '000000', f"{comp}: got {result}"

    def test_jump_table(self):
        for jump, bits in self.JUMP.items():
            result = to_bits(encode_compute('0', jump=jump))
            assert result == '1110101010000' + bits, f"{jump}: got {result}"

    def test_dest_bits(self):
        cases = [
            (set(),                                    '000'),
            ({Register.M},                             '001'),
            ({Register.D},                             '010'),
            ({Register.D, Register.M},                 '011'),
            ({Register.A},                             '100'),
            ({Register.A, Register.M},                 '101'),
            ({Register.A, Register.D},                 '110'),
            ({Register.A, Register.D, Register.M},     '111'),
        ]
        for dest, bits in cases:
            assert to_bits(encode_compute('D', dest)) == '1110001100' + bits + '000'

    def test_unknown_computation(self):
        with pytest.raises(UnknownComputation):
            encode_compute('D+D')

    def test_address_bounds(self):
        assert encode_address(0) == 0
        assert encode_address(32767) == 0x7FFF
        with pytest.raises(AddressOutOfRange):
            encode_address(32768)
        with pytest.raises(AddressOutOfRange):
            encode_address(-1)


class TestSymbolTable:
    def test_predefined(self):
        table = SymbolTable()
        for n in range(16):
            assert table[f"R{n}"] == n
        assert [table[s] for s in ('SP', 'LCL', 'ARG', 'THIS', 'THAT')] == [0, 1, 2, 3, 4]
        assert table['SCREEN'] == 16384
        assert table['KBD'] == 24576

    def test_predefined_is_immutable(self):
        with pytest.raises(TypeError):
            PREDEFINED_SYMBOLS['R0'] = 5

    def test_variables_allocated_from_16(self):
        table = SymbolTable()
        assert [table.resolve(n) for n in ('i', 'j', 'i', 'k')] == [16, 17, 16, 18]
        assert table.variables() == [('i', 16), ('j', 17), ('k', 18)]

    def test_resolve_known_does_not_allocate(self):
        table = SymbolTable()
        table.add_label('LOOP', 7)
        assert table.resolve('LOOP') == 7
        assert table.resolve('R3') == 3
        assert table.variables() == []

    def test_duplicate_label_rejected(self):
        table = SymbolTable()
        table.add_label('LOOP', 1)
        with pytest.raises(DuplicateLabel):
            table.add_label('LOOP', 5)
        assert table['LOOP'] == 1

    def test_label_cannot_shadow_predefined(self):
        with pytest.raises(DuplicateLabel, match="predefined"):
            SymbolTable().add_label('SCREEN', 3)

    def test_variable_counter_overflow(self):
        table = SymbolTable()
        table.next_variable = 32767
        assert table.resolve('last') == 32767
        with pytest.raises(AddressOutOfRange):
            table.resolve('one_too_many')

    def test_tables_are_independent(self):
        a, b = SymbolTable(), SymbolTable()
        a.resolve('x')
        a.add_label('L', 2)
        assert 'x' not in b and 'L' not in b
        assert b.resolve('y') == 16


class TestPasses:
    def test_first_pass_binds_labels(self):
        records = parse_source("(START)\n@1\nD=A\n(MID)\n(ALSO_MID)\n0;JMP\n(END)")
        table = SymbolTable()
        count = first_pass(records, table)
        assert count == 3
        assert table.labels() == [('START', 0), ('MID', 2), ('ALSO_MID', 2), ('END', 3)]

    def test_first_pass_does_not_allocate_variables(self):
        table = SymbolTable()
        first_pass(parse_source("@x\n@y"), table)
        assert table.variables() == []

    def test_second_pass_uses_given_table(self):
        table = SymbolTable()
        table.add_label('TARGET', 100)
        assert second_pass(parse_source("(IGNORED)\n@TARGET"), table) == [100]

    def test_duplicate_label_reports_line(self):
        with pytest.raises(DuplicateLabel) as exc:
            assemble("(A1)\n@0\n(A1)\n0;JMP")
        assert exc.value.line_num == 3


class TestScenarios:
    def test_add_constants(self):
        assert _bits("@2\nD=A\n@3\nD=D+A\n@0\nM=D") == [
            '0000000000000010',
            '1110110000010000',
            '0000000000000011',
            '1110000010010000',
            '0000000000000000',
            '1110001100001000',
        ]

    def test_loop_label(self):
        asm = Assembler()
        words = asm.assemble("(LOOP)\n@LOOP\n0;JMP")
        assert asm.symbols['LOOP'] == 0
        assert [to_bits(w) for w in words] == ['0000000000000000', '1110101010000111']

    def test_predefined_only(self):
        asm = Assembler()
        words = asm.assemble("@R0\nD=M\n@R1\nM=D")
        assert words == [0, 0b1111110000010000, 1, 0b1110001100001000]
        assert asm.symbols.variables() == []

    def test_io_symbols(self):
        assert assemble("@SCREEN\n@KBD\n@THAT") == [16384, 24576, 4]

    def test_duplicate_dest(self):
        with pytest.raises(DuplicateDestRegister):
            assemble("AA=D")

    def test_multiple_assignment(self):
        with pytest.raises(MultipleAssignment):
            assemble("D==A")


class TestProperties:
    SOURCE = "@i\nM=1\n(LOOP)\n@i\nD=M\n@END\nD;JGT\n@LOOP\n0;JMP\n(END)\n@END\n0;JMP"

    def test_deterministic(self):
        assert assemble(self.SOURCE) == assemble(self.SOURCE)

    def test_comment_and_whitespace_invariance(self):
        noisy = "\n".join(f"   {line}\t// note {n}\n// full-line comment"
                          for n, line in enumerate(self.SOURCE.split("\n")))
        noisy = noisy.replace("=", " = ").replace(";", " ; ")
        assert assemble(noisy) == assemble(self.SOURCE)

    def test_label_transparency(self):
        lines = self.SOURCE.split("\n")
        non_labels = [l for l in lines if not l.startswith("(")]
        assert len(assemble(self.SOURCE)) == len(non_labels)

    def test_forward_reference(self):
        words = assemble("@END\n0;JMP\n(END)\n@END\n0;JMP")
        assert words[0] == words[2] == 2

    def test_variable_sequence(self):
        assert assemble("@i\n@j\n@LOOP\n@k\n@i\n(LOOP)") == [16, 17, 5, 18, 16]

    def test_variable_allocated_after_labels_known(self):
        # a name later defined as a label must not be taken as a variable
        assert assemble("@x\n@L\n(L)\n@y") == [16, 2, 17]

    def test_every_literal_encodes_to_itself(self):
        values = list(range(32768))
        assert assemble([f"@{v}" for v in values]) == values

    def test_literal_over_limit(self):
        with pytest.raises(AddressOutOfRange):
            assemble("@32768")

    def test_label_address_over_limit(self):
        lines = ["@BIG"] + ["0"] * 32767 + ["(BIG)"]
        with pytest.raises(AddressOutOfRange) as exc:
            assemble(lines)
        assert exc.value.line_num == 1


class TestAssemblerState:
    def test_fresh_symbol_table_per_run(self):
        asm = Assembler()
        asm.assemble("@x")
        assert asm.assemble("@y") == [16]
        assert 'x' not in asm.symbols

    def test_no_partial_output_on_error(self):
        asm = Assembler()
        asm.assemble("@1")
        with pytest.raises(AssemblerError):
            asm.assemble("@1\nD=A\nD=Q")
        assert asm.words == []

    def test_failed_parse_clears_previous_run(self):
        asm = Assembler()
        asm.assemble("(TOP)\n@1\nD=A")
        with pytest.raises(UnknownComputation):
            asm.assemble("D=Q")
        assert asm.records == [] and asm.words == []
        assert 'TOP' not in asm.symbols
        assert asm.get_listing().split("\n")[0].split() == ['ADDR', 'HEX', 'BINARY', 'SOURCE']

    def test_failed_second_pass_leaves_no_records(self):
        asm = Assembler()
        asm.assemble("@1\nD=A")
        with pytest.raises(AddressOutOfRange):
            asm.assemble(["@x", "@BIG"] + ["0"] * 32766 + ["(BIG)"])
        assert asm.records == [] and asm.words == []
        assert asm.symbols.labels() == [] and asm.symbols.variables() == []
        asm.get_listing()

    def test_accepts_iterable_of_lines(self):
        assert assemble(["@2\n", "D=A\n"]) == [2, 0b1110110000010000]


class TestCompleteProgram:
    """Max.asm from nand2tetris project 6 with its published Max.hack."""

    MAX_ASM = """
// Computes R2 = max(R0, R1)
   @R0
   D=M              // D = first number
   @R1
   D=D-M            // D = first number - second number
   @OUTPUT_FIRST
   D;JGT            // if D>0 (first is greater) goto output_first
   @R1
   D=M              // D = second number
   @OUTPUT_D
   0;JMP            // goto output_d
(OUTPUT_FIRST)
   @R0
   D=M              // D = first number
(OUTPUT_D)
   @R2
   M=D              // M[2] = D (greatest number)
(INFINITE_LOOP)
   @INFINITE_LOOP
   0;JMP            // infinite loop
"""

    MAX_HACK = [
        '0000000000000000',
        '1111110000010000',
        '0000000000000001',
        '1111010011010000',
        '0000000000001010',
        '1110001100000001',
        '0000000000000001',
        '1111110000010000',
        '0000000000001100',
        '1110101010000111',
        '0000000000000000',
        '1111110000010000',
        '0000000000000010',
        '1110001100001000',
        '0000000000001110',
        '1110101010000111',
    ]

    def test_max(self):
        assert _bits(self.MAX_ASM) == self.MAX_HACK

    def test_max_hack_text(self):
        assert assemble_source(self.MAX_ASM) == "\n".join(self.MAX_HACK) + "\n"

    def test_max_symbols(self):
        asm = Assembler()
        asm.assemble(self.MAX_ASM)
        assert asm.symbols.labels() == [
            ('OUTPUT_FIRST', 10), ('OUTPUT_D', 12), ('INFINITE_LOOP', 14)]
        assert asm.symbols.variables() == []


class TestOutput:
    def test_binary_big_endian(self):
        assert assemble_source("@2\nD=A", output='bin') == b'\x00\x02\xEC\x10'

    def test_words(self):
        assert assemble_source("@2\nD=A", output='words') == [2, 0xEC10]

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            assemble_source("@2", output='s19')

    def test_hack_text_empty_program(self):
        assert to_hack_text([]) == ""
        assert assemble_source("// nothing\n") == ""

    def test_listing(self):
        asm = Assembler()
        asm.assemble("(LOOP)\n@LOOP // top\n0;JMP")
        listing = asm.get_listing().split("\n")
        assert listing[0].split() == ['ADDR', 'HEX', 'BINARY', 'SOURCE']
        assert listing[2].strip() == "(LOOP)"
        assert listing[3].split() == ['0', '0000', '0000000000000000', '@LOOP', '//', 'top']
        assert listing[4].split() == ['1', 'EA87', '1110101010000111', '0;JMP']

    def test_symbol_dump(self):
        asm = Assembler()
        asm.assemble("(LOOP)\n@n\n@LOOP")
        dump = asm.get_symbols()
        assert "Labels:" in dump and "Variables:" in dump
        assert any(line.split() == ['LOOP', '0'] for line in dump.split("\n"))
        assert any(line.split() == ['n', '16'] for line in dump.split("\n"))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
