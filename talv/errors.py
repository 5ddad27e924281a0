"""
Exceptions raised by the rules engine.

Every rejection of ordinary bad input is a ValueError subclass, so callers
that only care about "did it work" can catch ValueError. Capacity and
invariant failures are kept out of that family on purpose: the first asks
for a bigger buffer, the second means the Position itself is corrupt.
"""


class MalformedInput(ValueError):
    """Position, coordinate or move text that cannot be parsed."""


class IllegalMove(ValueError):
    """A move the current position does not allow."""


class NoSuchMove(IllegalMove):
    """No friendly piece matches a notation-level move description."""


class AmbiguousMove(IllegalMove):
    """More than one friendly piece matches a notation-level move description."""


class CapacityExceeded(Exception):
    """A move sink cannot accept another move."""


class InvariantViolation(RuntimeError):
    """The Position breaks a structural invariant (e.g. a missing king)."""
