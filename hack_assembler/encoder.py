"""
Instruction encoder for the Hack machine language.

Two instruction formats, both 16 bits wide:

  A-instruction   0vvv vvvv vvvv vvvv   v = 15-bit address / constant
  C-instruction   111a cccc ccdd djjj   a,c = ALU function (comp)
                                        d   = destination (A, D, M)
                                        j   = jump condition

Every field is looked up in a fixed table below; there is no conditional
bit-twiddling. To check an encoding, read the table row.

Reference: Nisan & Schocken, "The Elements of Computing Systems",
           ch. 4 (Machine Language) and ch. 6 (Assembler).
"""

from __future__ import annotations
import enum
from typing import Dict, Iterable, Optional

from .errors import AddressOutOfRange, UnknownComputation
from .symbols import ADDRESS_LIMIT

__all__ = [
    'Register', 'Jump', 'COMP_BITS', 'DEST_BITS', 'JUMP_BITS',
    'WORD_BITS', 'C_PREFIX', 'encode_address', 'encode_compute',
]

WORD_BITS = 16
C_PREFIX = 0b111 << 13          # opcode marker for C-instructions


# ──────────────────────────────────────────────
# Registers and jump conditions
# ──────────────────────────────────────────────

class Register(enum.Enum):
    A = "A"
    D = "D"
    M = "M"


class Jump(enum.Enum):
    JGT = "JGT"
    JEQ = "JEQ"
    JGE = "JGE"
    JLT = "JLT"
    JNE = "JNE"
    JLE = "JLE"
    JMP = "JMP"


# ──────────────────────────────────────────────
# Field tables
# ──────────────────────────────────────────────
# comp: mnemonic -> a c1 c2 c3 c4 c5 c6 (7 bits)
# a=1 selects M in place of A.

COMP_BITS: Dict[str, int] = {
    '0':   0b0_101010,
    '1':   0b0_111111,
    '-1':  0b0_111010,
    'D':   0b0_001100,
    'A':   0b0_110000,
    'M':   0b1_110000,
    '!D':  0b0_001101,
    '!A':  0b0_110001,
    '!M':  0b1_110001,
    '-D':  0b0_001111,
    '-A':  0b0_110011,
    '-M':  0b1_110011,
    'D+1': 0b0_011111,
    'A+1': 0b0_110111,
    'M+1': 0b1_110111,
    'D-1': 0b0_001110,
    'A-1': 0b0_110010,
    'M-1': 0b1_110010,
    'D+A': 0b0_000010,
    'D+M': 0b1_000010,
    'D-A': 0b0_010011,
    'D-M': 0b1_010011,
    'A-D': 0b0_000111,
    'M-D': 0b1_000111,
    'D&A': 0b0_000000,
    'D&M': 0b1_000000,
    'D|A': 0b0_010101,
    'D|M': 0b1_010101,
}

# dest: d1 d2 d3 = A D M
DEST_BITS: Dict[Register, int] = {
    Register.A: 0b100,
    Register.D: 0b010,
    Register.M: 0b001,
}

# jump: j1 j2 j3 (None = no jump)
JUMP_BITS: Dict[Optional[Jump], int] = {
    None:     0b000,
    Jump.JGT: 0b001,
    Jump.JEQ: 0b010,
    Jump.JGE: 0b011,
    Jump.JLT: 0b100,
    Jump.JNE: 0b101,
    Jump.JLE: 0b110,
    Jump.JMP: 0b111,
}


# ──────────────────────────────────────────────
# Encoders
# ──────────────────────────────────────────────

def encode_address(value: int) -> int:
    """Encode a resolved A-instruction value. The top bit is always 0."""
    if not 0 <= value <= ADDRESS_LIMIT:
        raise AddressOutOfRange(
            f"Address {value} outside 0..{ADDRESS_LIMIT}")
    return value & ADDRESS_LIMIT


def encode_compute(comp: str, dest: Iterable[Register] = (),
                   jump: Optional[Jump] = None) -> int:
    """Encode a C-instruction from its comp mnemonic, dest registers and jump."""
    try:
        comp_bits = COMP_BITS[comp]
    except KeyError:
        raise UnknownComputation(f"Unknown computation: '{comp}'") from None

    dest_bits = 0
    for reg in dest:
        dest_bits |= DEST_BITS[reg]

    return C_PREFIX | (comp_bits << 6) | (dest_bits << 3) | JUMP_BITS[jump]
