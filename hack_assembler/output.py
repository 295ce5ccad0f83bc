"""
Renderers for assembled Hack programs.

  .hack     one 16-character line of '0'/'1' per word (the format the
            course CPU emulator loads)
  binary    big-endian, two bytes per word
  listing   address, word in hex and binary, source text
"""

from __future__ import annotations
from typing import Iterable, List, Sequence

from .encoder import WORD_BITS
from .parser import Instruction, LabelDefinition

__all__ = ['to_bits', 'to_hack_text', 'to_binary', 'to_listing', 'format_symbols']


def to_bits(word: int) -> str:
    return format(word & 0xFFFF, f"0{WORD_BITS}b")


def to_hack_text(words: Iterable[int]) -> str:
    return ''.join(to_bits(w) + '\n' for w in words)


def to_binary(words: Iterable[int]) -> bytes:
    data = bytearray()
    for w in words:
        data.append((w >> 8) & 0xFF)
        data.append(w & 0xFF)
    return bytes(data)


def to_listing(records: Sequence[Instruction], words: Sequence[int]) -> str:
    """Return a listing showing ROM address, word and source for each record.

    Labels get a row of their own with no address.
    """
    lines: List[str] = []
    lines.append(f"{'ADDR':>5}  {'HEX':<4}  {'BINARY':<16}  SOURCE")
    lines.append("-" * 60)

    pc = 0
    for record in records:
        raw = record.raw.strip()
        if isinstance(record, LabelDefinition):
            lines.append(f"{'':>5}  {'':4}  {'':16}  {raw}")
            continue
        word = words[pc]
        lines.append(f"{pc:>5}  {word:04X}  {to_bits(word)}  {raw}")
        pc += 1

    return '\n'.join(lines) + '\n'


def format_symbols(symbols) -> str:
    """Dump user labels and variables from a SymbolTable."""
    lines = ["Labels:"]
    for name, addr in symbols.labels():
        lines.append(f"  {name:<24} {addr:>5}")
    lines.append("Variables:")
    for name, addr in symbols.variables():
        lines.append(f"  {name:<24} {addr:>5}")
    return '\n'.join(lines) + '\n'
