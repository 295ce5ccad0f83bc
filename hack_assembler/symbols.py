"""
Symbol table for the Hack assembler.

Three kinds of symbols share one namespace:

  predefined   fixed by the machine (R0-R15, SP..THAT, SCREEN, KBD)
  labels       bound to an instruction position during pass 1
  variables    bound to the next free RAM word (from 16 up) the first time
               an address instruction names an unknown symbol in pass 2

The predefined map is an immutable module constant. Each assembly run
builds its own SymbolTable from it, so nothing leaks between runs.
Entries are only ever added, never rebound or removed.
"""

from __future__ import annotations
import logging
from types import MappingProxyType
from typing import Dict, List, Mapping, Tuple

from .errors import AddressOutOfRange, DuplicateLabel

__all__ = ['PREDEFINED_SYMBOLS', 'VARIABLE_BASE', 'ADDRESS_LIMIT', 'SymbolTable']

log = logging.getLogger(__name__)

ADDRESS_LIMIT = 0x7FFF          # largest value an address instruction can hold
VARIABLE_BASE = 16              # first RAM word handed out to variables

SCREEN_BASE = 0x4000            # memory-mapped display
KBD_ADDR = 0x6000               # memory-mapped keyboard

PREDEFINED_SYMBOLS: Mapping[str, int] = MappingProxyType({
    **{f"R{n}": n for n in range(16)},
    'SP':     0,
    'LCL':    1,
    'ARG':    2,
    'THIS':   3,
    'THAT':   4,
    'SCREEN': SCREEN_BASE,
    'KBD':    KBD_ADDR,
})


class SymbolTable:
    """Per-run mapping from symbol name to address.

    Usage:
        table = SymbolTable()
        table.add_label('LOOP', 4)
        table.resolve('i')        # -> 16, allocated as a variable
        table.resolve('LOOP')     # -> 4
    """

    def __init__(self):
        self._entries: Dict[str, int] = dict(PREDEFINED_SYMBOLS)
        self._labels: List[str] = []
        self._variables: List[str] = []
        self.next_variable: int = VARIABLE_BASE

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __getitem__(self, name: str) -> int:
        return self._entries[name]

    def add_label(self, name: str, address: int) -> None:
        """Bind a label to an instruction address (pass 1)."""
        if name in PREDEFINED_SYMBOLS:
            raise DuplicateLabel(f"Label '{name}' redefines a predefined symbol")
        if name in self._entries:
            raise DuplicateLabel(
                f"Label '{name}' already defined (address {self._entries[name]})")
        self._entries[name] = address
        self._labels.append(name)
        log.debug("label %s -> %d", name, address)

    def resolve(self, name: str) -> int:
        """Look up a symbol, allocating it as a variable if unknown (pass 2)."""
        if name in self._entries:
            return self._entries[name]
        if self.next_variable > ADDRESS_LIMIT:
            raise AddressOutOfRange(
                f"No address left for variable '{name}' "
                f"(variable counter reached {self.next_variable})")
        address = self.next_variable
        self._entries[name] = address
        self._variables.append(name)
        self.next_variable += 1
        log.debug("variable %s -> %d", name, address)
        return address

    def labels(self) -> List[Tuple[str, int]]:
        """User labels in definition order."""
        return [(name, self._entries[name]) for name in self._labels]

    def variables(self) -> List[Tuple[str, int]]:
        """User variables in allocation order."""
        return [(name, self._entries[name]) for name in self._variables]
