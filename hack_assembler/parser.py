"""
Line parser for Hack assembly.

Turns one source line into one instruction record:

  @value / @symbol     → AddressInstruction
  (LABEL)              → LabelDefinition
  dest=comp;jump       → ComputeInstruction  (dest= and ;jump optional)

Comments start at '//' and run to end of line. Spaces, tabs and carriage
returns are removed everywhere before classification, so "D = D + A"
and "D=D+A" are the same instruction. Blank and comment-only lines
produce no record.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Union

from .encoder import COMP_BITS, Jump, Register
from .errors import (
    DuplicateDestRegister, LiteralOutOfRange, MalformedLabel, MalformedLiteral,
    MissingComputation, MultipleAssignment, MultipleJump, UnknownComputation,
    UnknownDestRegister, UnknownJump,
)
from .symbols import ADDRESS_LIMIT

__all__ = [
    'AddressInstruction', 'LabelDefinition', 'ComputeInstruction', 'Instruction',
    'parse_line', 'parse_lines', 'parse_source',
]

COMMENT = '//'

_STRIP_CHARS = str.maketrans('', '', ' \t\r')
_DIGITS = frozenset('0123456789')


# ──────────────────────────────────────────────
# Instruction records
# ──────────────────────────────────────────────
# line_num / raw are carried for error messages and listings only and are
# left out of equality.

@dataclass(frozen=True)
class AddressInstruction:
    """@value: load a literal or a symbol's address into A."""
    target: Union[int, str]
    line_num: int = field(default=0, compare=False)
    raw: str = field(default="", compare=False)

    @property
    def is_symbolic(self) -> bool:
        return isinstance(self.target, str)


@dataclass(frozen=True)
class LabelDefinition:
    """(NAME): binds NAME to the address of the next instruction."""
    name: str
    line_num: int = field(default=0, compare=False)
    raw: str = field(default="", compare=False)


@dataclass(frozen=True)
class ComputeInstruction:
    """dest=comp;jump"""
    comp: str
    dest: FrozenSet[Register] = frozenset()
    jump: Optional[Jump] = None
    line_num: int = field(default=0, compare=False)
    raw: str = field(default="", compare=False)


Instruction = Union[AddressInstruction, LabelDefinition, ComputeInstruction]


# ──────────────────────────────────────────────
# Line classification
# ──────────────────────────────────────────────

def _clean(line: str) -> str:
    """Drop the comment, then every space, tab and carriage return."""
    pos = line.find(COMMENT)
    if pos >= 0:
        line = line[:pos]
    return line.translate(_STRIP_CHARS)


def _parse_address(body: str, line_num: int, raw: str) -> AddressInstruction:
    if all(ch in _DIGITS for ch in body):
        if not body:
            raise MalformedLiteral("Missing value after '@'", line_num, raw)
        # leading zeros are fine; anything past 5 significant digits is too big
        significant = body.lstrip('0')
        if len(significant) > len(str(ADDRESS_LIMIT)):
            raise LiteralOutOfRange(
                f"Literal {significant[:10]}... exceeds {ADDRESS_LIMIT}", line_num, raw)
        value = int(significant or "0")
        if value > ADDRESS_LIMIT:
            raise LiteralOutOfRange(
                f"Literal {value} exceeds {ADDRESS_LIMIT}", line_num, raw)
        return AddressInstruction(value, line_num, raw)
    return AddressInstruction(body, line_num, raw)


def _parse_label(text: str, line_num: int, raw: str) -> LabelDefinition:
    if len(text) < 2 or not text.endswith(')'):
        raise MalformedLabel(f"Unterminated label: '{text}'", line_num, raw)
    name = text[1:-1]
    if not name:
        raise MalformedLabel("Empty label name", line_num, raw)
    if '(' in name or ')' in name:
        raise MalformedLabel(f"Unmatched parenthesis in label: '{text}'", line_num, raw)
    return LabelDefinition(name, line_num, raw)


def _parse_dest(text: str, line_num: int, raw: str) -> FrozenSet[Register]:
    dest = set()
    for ch in text:
        try:
            reg = Register(ch)
        except ValueError:
            raise UnknownDestRegister(
                f"Unknown destination register '{ch}' in '{text}'",
                line_num, raw) from None
        if reg in dest:
            raise DuplicateDestRegister(
                f"Register '{ch}' repeated in destination '{text}'", line_num, raw)
        dest.add(reg)
    return frozenset(dest)


def _parse_compute(text: str, line_num: int, raw: str) -> ComputeInstruction:
    if text.count('=') > 1:
        raise MultipleAssignment(f"More than one '=' in '{text}'", line_num, raw)
    if text.count(';') > 1:
        raise MultipleJump(f"More than one ';' in '{text}'", line_num, raw)

    dest_text, _, rest = text.rpartition('=')
    comp, has_jump, jump_text = rest.partition(';')

    if not comp:
        raise MissingComputation(f"No computation in '{text}'", line_num, raw)
    if comp not in COMP_BITS:
        raise UnknownComputation(f"Unknown computation: '{comp}'", line_num, raw)

    dest = _parse_dest(dest_text, line_num, raw)

    jump = None
    if has_jump:
        try:
            jump = Jump(jump_text)
        except ValueError:
            raise UnknownJump(f"Unknown jump: '{jump_text}'", line_num, raw) from None

    return ComputeInstruction(comp, dest, jump, line_num, raw)


def parse_line(line: str, line_num: int = 0) -> Optional[Instruction]:
    """Parse one source line. Returns None for blank / comment-only lines."""
    text = _clean(line)
    if not text:
        return None
    if text.startswith('@'):
        return _parse_address(text[1:], line_num, line)
    if text.startswith('('):
        return _parse_label(text, line_num, line)
    return _parse_compute(text, line_num, line)


def parse_lines(lines: Iterable[str]) -> List[Instruction]:
    """Parse a sequence of source lines (numbered from 1), dropping blanks."""
    records = []
    for i, line in enumerate(lines, 1):
        record = parse_line(line.rstrip('\r\n'), i)
        if record is not None:
            records.append(record)
    return records


def parse_source(source: str) -> List[Instruction]:
    """Parse a whole source text."""
    return parse_lines(source.split('\n'))
