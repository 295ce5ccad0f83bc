"""
Hack Assembler
==============
A two-pass assembler for the 16-bit Hack computer (nand2tetris).

Architecture:
    ┌──────────┐    ┌──────────┐    ┌──────────┐    ┌──────────┐    ┌──────────┐
    │ Source   │───>│  Parser  │───>│  Pass 1  │───>│  Pass 2  │───>│  Output  │
    │ (.asm)   │    │ (records)│    │ (labels) │    │ (words)  │    │ (.hack)  │
    └──────────┘    └──────────┘    └──────────┘    └──────────┘    └──────────┘

    - parser.py:    one line -> AddressInstruction / LabelDefinition / ComputeInstruction
    - symbols.py:   predefined symbols + per-run label/variable table
    - encoder.py:   comp/dest/jump lookup tables -> 16-bit words
    - assembler.py: the two passes and the Assembler facade
    - output.py:    .hack text, raw binary, listing, symbol dump
"""

__version__ = "0.1.0"

from .errors import *
from .symbols import PREDEFINED_SYMBOLS, SymbolTable
from .parser import (
    AddressInstruction, LabelDefinition, ComputeInstruction,
    parse_line, parse_lines, parse_source,
)
from .encoder import Register, Jump, encode_address, encode_compute
from .assembler import Assembler, assemble, first_pass, second_pass

def assemble_source(source: str, *, output: str = "hack"):
    """Assemble Hack source to .hack text, raw binary, listing, or a word list.

    Args:
        source: Hack assembly source string.
        output: 'hack' (default), 'bin', 'listing', or 'words'.

    Returns:
        str for 'hack' and 'listing', bytes for 'bin', List[int] for 'words'.
    """
    asm = Assembler()
    words = asm.assemble(source)

    if output == 'hack':
        return asm.to_hack()
    elif output == 'bin':
        return asm.to_binary()
    elif output == 'listing':
        return asm.get_listing()
    elif output == 'words':
        return words
    raise ValueError(f"Unknown output format: {output}")
