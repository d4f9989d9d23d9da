"""SHA-256 message schedule expansion.

The first 16 schedule words are the block itself; the remaining 48 follow
the recurrence

    W[i] = W[i-16] + σ0(W[i-15]) + W[i-7] + σ1(W[i-2])      (mod 2**32)
"""

from __future__ import annotations

import logging
from typing import Sequence, Tuple, Union

from compress import MASK32, _rotr
from preprocess import block_words


logger = logging.getLogger(__name__)

SCHEDULE_WORDS = 64


def _shr(x: int, n: int) -> int:
    """Right-shift a 32-bit word `x` by `n` bits."""
    x &= MASK32
    return x >> n


def _small_sigma0(x: int) -> int:
    """SHA-256 function σ0 used in the message schedule."""
    return (_rotr(x, 7) ^ _rotr(x, 18) ^ _shr(x, 3)) & MASK32


def _small_sigma1(x: int) -> int:
    """SHA-256 function σ1 used in the message schedule."""
    return (_rotr(x, 17) ^ _rotr(x, 19) ^ _shr(x, 10)) & MASK32


def expand_message_schedule(block: Union[str, Sequence[int]]) -> Tuple[int, ...]:
    """Expand one block into the 64-word message schedule w[0..63].

    `block` is either the 512-bit block as a bit string or its sixteen
    32-bit words.
    """
    words = block_words(block) if isinstance(block, str) else list(block)
    if len(words) != 16:
        raise ValueError(f"Message schedule needs exactly 16 block words, got {len(words)}")

    w = [word & MASK32 for word in words] + [0] * (SCHEDULE_WORDS - 16)
    for i in range(16, SCHEDULE_WORDS):
        s0 = _small_sigma0(w[i - 15])
        s1 = _small_sigma1(w[i - 2])
        w[i] = (w[i - 16] + s0 + w[i - 7] + s1) & MASK32

    logger.debug("Expanded schedule, w[63]=%08x", w[-1])
    return tuple(w)
