"""Forward SHA-256 compression with per-round observation.

One iteration of the compression loop takes the working state
`(a, b, c, d, e, f, g, h)`, the round constant `k` and the schedule word `w`:

    S1    = (e >>> 6) ^ (e >>> 11) ^ (e >>> 25)
    ch    = (e & f) ^ (~e & g)
    temp1 = h + S1 + ch + k + w

    S0    = (a >>> 2) ^ (a >>> 13) ^ (a >>> 22)
    maj   = (a & b) ^ (a & c) ^ (b & c)
    temp2 = S0 + maj

    a' = temp1 + temp2
    e' = d + temp1

    b' = a
    c' = b
    d' = c
    f' = e
    g' = f
    h' = g

All additions are performed modulo 2**32, as in SHA-256. Besides the new
state, each round reports its intermediate values as a `RoundValues` record
so callers can show how the registers evolve.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple


MASK32 = 0xFFFFFFFF
ROUNDS = 64

State = Tuple[int, int, int, int, int, int, int, int]

K_VALUES: Tuple[int, ...] = (
    0x428A2F98,
    0x71374491,
    0xB5C0FBCF,
    0xE9B5DBA5,
    0x3956C25B,
    0x59F111F1,
    0x923F82A4,
    0xAB1C5ED5,
    0xD807AA98,
    0x12835B01,
    0x243185BE,
    0x550C7DC3,
    0x72BE5D74,
    0x80DEB1FE,
    0x9BDC06A7,
    0xC19BF174,
    0xE49B69C1,
    0xEFBE4786,
    0x0FC19DC6,
    0x240CA1CC,
    0x2DE92C6F,
    0x4A7484AA,
    0x5CB0A9DC,
    0x76F988DA,
    0x983E5152,
    0xA831C66D,
    0xB00327C8,
    0xBF597FC7,
    0xC6E00BF3,
    0xD5A79147,
    0x06CA6351,
    0x14292967,
    0x27B70A85,
    0x2E1B2138,
    0x4D2C6DFC,
    0x53380D13,
    0x650A7354,
    0x766A0ABB,
    0x81C2C92E,
    0x92722C85,
    0xA2BFE8A1,
    0xA81A664B,
    0xC24B8B70,
    0xC76C51A3,
    0xD192E819,
    0xD6990624,
    0xF40E3585,
    0x106AA070,
    0x19A4C116,
    0x1E376C08,
    0x2748774C,
    0x34B0BCB5,
    0x391C0CB3,
    0x4ED8AA4A,
    0x5B9CCA4F,
    0x682E6FF3,
    0x748F82EE,
    0x78A5636F,
    0x84C87814,
    0x8CC70208,
    0x90BEFFFA,
    0xA4506CEB,
    0xBEF9A3F7,
    0xC67178F2,
)


@dataclass(frozen=True)
class RoundValues:
    """Working registers after one round plus the values that produced them."""

    round: int
    a: int
    b: int
    c: int
    d: int
    e: int
    f: int
    g: int
    h: int
    S0: int
    S1: int
    ch: int
    maj: int
    temp1: int
    temp2: int

    def state(self) -> State:
        return (self.a, self.b, self.c, self.d, self.e, self.f, self.g, self.h)


def _rotr(x: int, n: int) -> int:
    """Right-rotate a 32-bit word `x` by `n` bits."""
    x &= MASK32
    return ((x >> n) | (x << (32 - n))) & MASK32


def compression_round(
    a: int,
    b: int,
    c: int,
    d: int,
    e: int,
    f: int,
    g: int,
    h: int,
    w: int,
    k: int,
    round_number: int = 1,
) -> RoundValues:
    """Perform one SHA-256 compression round and record its intermediates.

    Parameters
    ----------
    a, b, c, d, e, f, g, h : int
        32-bit words representing the current working state.
    w : int
        Message schedule word `w[i]`.
    k : int
        Round constant `k[i]`.
    round_number : int
        1-based index stored in the returned record.

    Returns
    -------
    RoundValues
        The updated working state together with S0, S1, ch, maj, temp1 and
        temp2, all reduced modulo 2**32.
    """
    a &= MASK32
    b &= MASK32
    c &= MASK32
    d &= MASK32
    e &= MASK32
    f &= MASK32
    g &= MASK32
    h &= MASK32

    S1 = _rotr(e, 6) ^ _rotr(e, 11) ^ _rotr(e, 25)
    ch = ((e & f) ^ ((~e) & g)) & MASK32
    temp1 = (h + S1 + ch + (k & MASK32) + (w & MASK32)) & MASK32

    S0 = _rotr(a, 2) ^ _rotr(a, 13) ^ _rotr(a, 22)
    maj = (a & b) ^ (a & c) ^ (b & c)
    temp2 = (S0 + maj) & MASK32

    return RoundValues(
        round=round_number,
        a=(temp1 + temp2) & MASK32,
        b=a,
        c=b,
        d=c,
        e=(d + temp1) & MASK32,
        f=e,
        g=f,
        h=g,
        S0=S0,
        S1=S1,
        ch=ch,
        maj=maj,
        temp1=temp1,
        temp2=temp2,
    )


def iter_rounds(state: Sequence[int], ws: Sequence[int]) -> Iterator[RoundValues]:
    """Yield the record of each of the 64 rounds for one block, in order.

    The working registers start as a copy of `state`; the last record's
    `state()` is the block's contribution to the hash state.
    """
    if len(state) != 8:
        raise ValueError(f"Working state must have 8 words, got {len(state)}")
    if len(ws) != ROUNDS:
        raise ValueError(f"compress64 expects 64 message schedule words, got {len(ws)}")

    working = tuple(state)
    for i in range(ROUNDS):
        record = compression_round(*working, ws[i], K_VALUES[i], round_number=i + 1)
        working = record.state()
        yield record


def compress64(
    a: int,
    b: int,
    c: int,
    d: int,
    e: int,
    f: int,
    g: int,
    h: int,
    ws: Sequence[int],
) -> State:
    """Run the full 64-round SHA-256 compression loop for one block.

    Parameters
    ----------
    a, b, c, d, e, f, g, h : int
        Initial working state words (the current hash value).
    ws : Sequence[int]
        The 64-word message schedule `w[0..63]` for this block.

    Returns
    -------
    (a, b, c, d, e, f, g, h) : tuple[int, ...]
        Final working state words after 64 rounds. Use `iter_rounds` to
        observe the intermediate rounds.
    """
    final = None
    for record in iter_rounds((a, b, c, d, e, f, g, h), ws):
        final = record
    return final.state()
