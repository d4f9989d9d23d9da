"""The SHA-256 chaining value H0..H7 and digest assembly."""

from __future__ import annotations

from typing import Sequence, Tuple

from compress import MASK32, State


# Initial hash values (first 32 bits of the fractional parts of the
# square roots of the first 8 primes 2..19), as per FIPS 180-4.
INITIAL_HASH: State = (
    0x6A09E667,
    0xBB67AE85,
    0x3C6EF372,
    0xA54FF53A,
    0x510E527F,
    0x9B05688C,
    0x1F83D9AB,
    0x5BE0CD19,
)


def update_hash_state(H_i: Sequence[int], working: Sequence[int]) -> State:
    """Fold one block's working registers a..h into the chaining value H_i.

    This is the standard SHA-256 post-compression state update:
        H_{i+1}[j] = (H_i[j] + working[j]) mod 2^32
    """
    if len(H_i) != 8 or len(working) != 8:
        raise ValueError(
            f"Hash state and working registers must have 8 words, "
            f"got {len(H_i)} and {len(working)}"
        )
    h0, h1, h2, h3, h4, h5, h6, h7 = (
        (h_word + w_word) & MASK32 for h_word, w_word in zip(H_i, working)
    )
    return (h0, h1, h2, h3, h4, h5, h6, h7)


def format_words(state: Sequence[int]) -> Tuple[str, ...]:
    """Render 32-bit words as 8-digit lowercase hex strings."""
    return tuple(f"{word & MASK32:08x}" for word in state)


def finalize_digest(state: Sequence[int]) -> bytes:
    """Convert the final hash state into the 32-byte SHA-256 digest."""
    return b"".join((word & MASK32).to_bytes(4, byteorder="big") for word in state)


def hexdigest(state: Sequence[int]) -> str:
    """Concatenate H0..H7 into the 64-character hex digest."""
    return finalize_digest(state).hex()
