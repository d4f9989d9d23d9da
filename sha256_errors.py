"""Failure kinds raised by the SHA-256 stage pipeline.

Both are terminal for the computation that raised them: no digest is
produced and no further stages are emitted.
"""

from __future__ import annotations


class HashComputationError(ValueError):
    """Base class for errors that abort a hash computation."""


class InvalidInput(HashComputationError):
    """The input cannot be encoded into a bit sequence."""

    def __init__(self, message: str, position: int | None = None) -> None:
        super().__init__(message)
        self.position = position


class LengthOverflow(HashComputationError):
    """The message bit length does not fit in the 64-bit length field."""

    def __init__(self, length_bits: int) -> None:
        super().__init__(
            f"Message length {length_bits} bits does not fit in 64 bits"
        )
        self.length_bits = length_bits
