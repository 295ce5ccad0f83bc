"""
Error hierarchy for the Hack assembler.

Every failure is an AssemblerError subclass. The subclass name is the
error kind reported to the user, and each error carries the source line
number and text it came from (0 / "" when raised outside a source line,
e.g. by calling the encoder directly).
"""

from __future__ import annotations

__all__ = [
    'AssemblerError',
    'MalformedLiteral', 'LiteralOutOfRange', 'MalformedLabel',
    'MultipleAssignment', 'MultipleJump', 'MissingComputation',
    'DuplicateDestRegister', 'UnknownDestRegister',
    'UnknownComputation', 'UnknownJump',
    'AddressOutOfRange', 'DuplicateLabel',
]


class AssemblerError(Exception):
    """Raised on assembly errors."""
    def __init__(self, message: str, line_num: int = 0, line_text: str = ""):
        self.message = message
        self.line_num = line_num
        self.line_text = line_text
        super().__init__(f"Line {line_num}: {message}" if line_num else message)

    @property
    def kind(self) -> str:
        return type(self).__name__

    def at(self, line_num: int, line_text: str = "") -> AssemblerError:
        """Return a copy of this error pinned to a source line."""
        return type(self)(self.message, line_num, line_text)


# ── Parse errors ──

class MalformedLiteral(AssemblerError):
    """Address instruction literal is missing or unusable."""


class MalformedLabel(AssemblerError):
    """Unmatched or empty label parentheses."""


class MultipleAssignment(AssemblerError):
    """More than one '=' on a compute line."""


class MultipleJump(AssemblerError):
    """More than one ';' on a compute line."""


class MissingComputation(AssemblerError):
    """Compute line has no computation part."""


class DuplicateDestRegister(AssemblerError):
    """Same register named twice in a destination."""


class UnknownDestRegister(AssemblerError):
    """Destination names something other than A, D or M."""


class UnknownComputation(AssemblerError):
    """Computation mnemonic not in the ALU table."""


class UnknownJump(AssemblerError):
    """Jump mnemonic not in the jump table."""


# ── Resolution / encoding errors ──

class AddressOutOfRange(AssemblerError):
    """Resolved address does not fit the 15-bit address field."""


class LiteralOutOfRange(MalformedLiteral, AddressOutOfRange):
    """Numeric literal above 32767 (both malformed and out of range)."""


class DuplicateLabel(AssemblerError):
    """Label name already bound to a label or a predefined symbol."""
