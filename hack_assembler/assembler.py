"""
Two-pass assembler driver for the Hack computer.

Input:  Hack assembly text (a string or an iterable of lines)
Output: List of 16-bit machine words, one per A/C-instruction

How the two-pass algorithm works:
  Pass 1: Walk the parsed records with an instruction counter starting at 0.
          Every (LABEL) is bound to the counter's current value, i.e. the
          address of the next real instruction. Labels emit nothing.
  Pass 2: Walk the records again and emit one word per instruction. Labels
          are all known now, so forward jumps resolve. An @symbol that is
          still unknown becomes a variable at the next free RAM word (16, 17, ...).

The two passes share nothing but the SymbolTable. The first error aborts
the run; there is no partial output.
"""

from __future__ import annotations
import logging
from typing import Iterable, List, Union

from .encoder import encode_address, encode_compute
from .errors import AssemblerError
from .output import format_symbols, to_binary, to_hack_text, to_listing
from .parser import AddressInstruction, Instruction, LabelDefinition, parse_lines, parse_source
from .symbols import SymbolTable

__all__ = ['Assembler', 'assemble', 'first_pass', 'second_pass', 'encode']

log = logging.getLogger(__name__)


# ──────────────────────────────────────────────
# Passes
# ──────────────────────────────────────────────

def first_pass(records: Iterable[Instruction], symbols: SymbolTable) -> int:
    """Bind every label to its instruction address. Returns the instruction count."""
    counter = 0
    for record in records:
        if isinstance(record, LabelDefinition):
            try:
                symbols.add_label(record.name, counter)
            except AssemblerError as e:
                raise e.at(record.line_num, record.raw) from None
        else:
            counter += 1
    return counter


def encode(record: Instruction, symbols: SymbolTable) -> int:
    """Encode one A- or C-instruction, allocating variables as needed."""
    if isinstance(record, AddressInstruction):
        if record.is_symbolic:
            value = symbols.resolve(record.target)
        else:
            value = record.target
        return encode_address(value)
    if isinstance(record, LabelDefinition):
        raise TypeError(f"Label '{record.name}' has no encoding")
    return encode_compute(record.comp, record.dest, record.jump)


def second_pass(records: Iterable[Instruction], symbols: SymbolTable) -> List[int]:
    """Emit one word per non-label record, in source order."""
    words = []
    for record in records:
        if isinstance(record, LabelDefinition):
            continue
        try:
            words.append(encode(record, symbols))
        except AssemblerError as e:
            if e.line_num:
                raise
            raise e.at(record.line_num, record.raw) from None
    return words


# ──────────────────────────────────────────────
# The Assembler
# ──────────────────────────────────────────────

class Assembler:
    """Two-pass Hack assembler.

    Usage:
        asm = Assembler()
        words = asm.assemble(source_text)
        text = asm.to_hack()
    """

    def __init__(self):
        self.symbols: SymbolTable = SymbolTable()   # Fresh table per run
        self.records: List[Instruction] = []        # Parsed source (blank lines dropped)
        self.words: List[int] = []                  # Assembled machine words

    def assemble(self, source: Union[str, Iterable[str]]) -> List[int]:
        """Assemble source text (or lines) into a list of 16-bit words."""
        # A failed run leaves the assembler empty, never half-filled
        self.symbols = SymbolTable()
        self.records = []
        self.words = []

        if isinstance(source, str):
            records = parse_source(source)
        else:
            records = parse_lines(source)

        symbols = SymbolTable()
        count = first_pass(records, symbols)
        log.debug("pass 1: %d instructions, %d labels",
                  count, len(symbols.labels()))

        words = second_pass(records, symbols)
        log.debug("pass 2: %d words, %d variables",
                  len(words), len(symbols.variables()))

        self.symbols, self.records, self.words = symbols, records, words
        return words

    def to_hack(self) -> str:
        return to_hack_text(self.words)

    def to_binary(self) -> bytes:
        return to_binary(self.words)

    def get_listing(self) -> str:
        return to_listing(self.records, self.words)

    def get_symbols(self) -> str:
        return format_symbols(self.symbols)


# ──────────────────────────────────────────────
# Convenience functions
# ──────────────────────────────────────────────

def assemble(source: Union[str, Iterable[str]]) -> List[int]:
    """Assemble source text, return the machine words."""
    return Assembler().assemble(source)
