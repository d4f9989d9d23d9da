"""Message preprocessing for SHA-256: encoding, padding and block splitting.

Messages are handled as bit strings (``"0"``/``"1"`` characters) so that the
exact bits fed to the compression loop can be shown to a reader, and so that
non-byte-aligned messages pad correctly.

- `encode_text(text, encoding)` maps text to its bit string.
- `pad_bits(bits)` appends the SHA-256 padding (1 bit, zeros, 64-bit length).
- `split_into_blocks(padded)` cuts the padded bits into 512-bit blocks.
- `block_words(block)` reads a block as sixteen big-endian 32-bit words.
"""

from __future__ import annotations

from typing import Iterable, List

from sha256_errors import InvalidInput, LengthOverflow


BLOCK_BITS = 512
WORD_BITS = 32
LENGTH_FIELD_BITS = 64

# Residue the padded message must reach before the length field is appended.
_PAD_RESIDUE = BLOCK_BITS - LENGTH_FIELD_BITS

ENCODINGS = ("strict", "truncate", "utf-8")


def _byte_values(text: str, encoding: str) -> Iterable[int]:
    """Yield one 8-bit value per encoded unit of `text`."""
    if encoding == "utf-8":
        try:
            encoded = text.encode("utf-8")
        except UnicodeEncodeError as e:
            raise InvalidInput(
                f"Character {text[e.start]!r} at position {e.start} has no UTF-8 encoding",
                position=e.start,
            ) from e
        yield from encoded
        return

    for position, char in enumerate(text):
        code = ord(char)
        if code > 0xFF:
            if encoding == "strict":
                raise InvalidInput(
                    f"Character {char!r} (U+{code:04X}) at position {position} "
                    "does not fit in 8 bits",
                    position=position,
                )
            code &= 0xFF
        yield code


def encode_text(text: str, encoding: str = "strict") -> str:
    """Return the bit string for `text`, 8 bits per unit, MSB first.

    ``strict`` and ``truncate`` emit one 8-bit unit per character; ``strict``
    rejects characters above U+00FF while ``truncate`` keeps their low byte.
    ``utf-8`` emits the standard UTF-8 bytes.
    """
    if encoding not in ENCODINGS:
        raise ValueError(
            f"Unknown encoding {encoding!r}, expected one of {', '.join(ENCODINGS)}"
        )
    if not isinstance(text, str):
        raise InvalidInput(f"Expected text input, got {type(text).__name__}")

    return "".join(format(value, "08b") for value in _byte_values(text, encoding))


def length_field(length_bits: int) -> str:
    """Render the original message length as the 64-bit big-endian field."""
    if length_bits < 0:
        raise ValueError(f"Message length must be non-negative, got {length_bits}")
    if length_bits >= 1 << LENGTH_FIELD_BITS:
        raise LengthOverflow(length_bits)
    return format(length_bits, f"0{LENGTH_FIELD_BITS}b")


def pad_bits(bits: str) -> str:
    """Pad a message bit string as described in FIPS 180-4, section 5.1.1.

    The result length is a multiple of 512 bits.
    """
    if bits.strip("01"):
        raise InvalidInput("Bit sequence may only contain '0' and '1'")

    length_bits = len(bits)
    # Zero fill so that length + 1 + zeros ≡ 448 mod 512.
    zeros = (_PAD_RESIDUE - (length_bits + 1)) % BLOCK_BITS

    return bits + "1" + "0" * zeros + length_field(length_bits)


def split_into_blocks(padded: str) -> List[str]:
    """Split a padded bit string into 512-bit blocks, in message order."""
    if len(padded) % BLOCK_BITS != 0:
        raise ValueError(
            f"Padded message length must be a multiple of {BLOCK_BITS} bits, "
            f"got {len(padded)}"
        )
    return [padded[i : i + BLOCK_BITS] for i in range(0, len(padded), BLOCK_BITS)]


def block_words(block: str) -> List[int]:
    """Read a 512-bit block as its sixteen big-endian 32-bit words."""
    if len(block) != BLOCK_BITS:
        raise ValueError(f"Expected {BLOCK_BITS}-bit block, got {len(block)} bits")
    return [
        int(block[i : i + WORD_BITS], 2) for i in range(0, BLOCK_BITS, WORD_BITS)
    ]
