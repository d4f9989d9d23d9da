"""Stage-by-stage SHA-256 computation.

`iter_stages(text)` runs the whole pipeline and yields one observation per
intermediate artifact, in this order:

1. `BinaryForm`   - the encoded input bits
2. `PaddedForm`   - the padded bits (a multiple of 512)
3. per block, ascending:
   `Schedule`, then 64 `RoundRecord` items, then `BlockDigest`
4. `FinalDigest`  - the 64-character hex digest

Every call owns a fresh `HashComputation`, so interleaving two iterations
never mixes their hash state or counters. Word values are reported as
8-digit lowercase hex strings.

Typical usage:

    digest = compute("abc", observer=print)

    trace = collect_trace("abc")
    trace.blocks[0].rounds[63].a
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

from compress import RoundValues, iter_rounds
from hash_state import INITIAL_HASH, format_words, hexdigest, update_hash_state
from preprocess import encode_text, pad_bits, split_into_blocks
from schedule import expand_message_schedule


logger = logging.getLogger(__name__)

REGISTER_NAMES = ("a", "b", "c", "d", "e", "f", "g", "h")
ROUND_VALUE_NAMES = ("S0", "S1", "ch", "maj", "temp1", "temp2")


@dataclass(frozen=True)
class BinaryForm:
    bits: str

    kind = "binary_form"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "bits": self.bits}


@dataclass(frozen=True)
class PaddedForm:
    bits: str

    kind = "padded_form"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "bits": self.bits}


@dataclass(frozen=True)
class Schedule:
    """The 64-word message schedule of block `block` (1-indexed)."""

    block: int
    words: Tuple[str, ...]

    kind = "schedule"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "block": self.block, "words": list(self.words)}


@dataclass(frozen=True)
class RoundRecord:
    """Registers a..h after round `round` of block `block`, with intermediates."""

    block: int
    round: int
    a: str
    b: str
    c: str
    d: str
    e: str
    f: str
    g: str
    h: str
    S0: str
    S1: str
    ch: str
    maj: str
    temp1: str
    temp2: str

    kind = "round_record"

    @classmethod
    def from_values(cls, block: int, values: RoundValues) -> "RoundRecord":
        hex_values = {
            name: f"{getattr(values, name):08x}"
            for name in REGISTER_NAMES + ROUND_VALUE_NAMES
        }
        return cls(block=block, round=values.round, **hex_values)

    def registers(self) -> Tuple[str, ...]:
        return tuple(getattr(self, name) for name in REGISTER_NAMES)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.kind, "block": self.block, "round": self.round}
        for name in REGISTER_NAMES + ROUND_VALUE_NAMES:
            data[name] = getattr(self, name)
        return data


@dataclass(frozen=True)
class BlockDigest:
    """Hash registers H0..H7 after folding block `block`."""

    block: int
    registers: Tuple[str, ...]

    kind = "block_digest"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "block": self.block, "registers": list(self.registers)}


@dataclass(frozen=True)
class FinalDigest:
    digest: str

    kind = "final_digest"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "digest": self.digest}


Stage = Union[BinaryForm, PaddedForm, Schedule, RoundRecord, BlockDigest, FinalDigest]
Observer = Callable[[Stage], Any]


class HashComputation:
    """State owned by a single SHA-256 computation.

    The hash state is replaced (never mutated in place) once per block, and
    only by `update_hash_state`. An instance runs once; start a new one to
    hash again.
    """

    def __init__(self, text: str, encoding: str = "strict"):
        self.text = text
        self.encoding = encoding
        self.hash_state = INITIAL_HASH
        self.blocks_processed = 0
        self._started = False

    def stages(self) -> Iterator[Stage]:
        if self._started:
            raise RuntimeError("HashComputation can only be run once")
        self._started = True

        binary = encode_text(self.text, self.encoding)
        yield BinaryForm(binary)

        padded = pad_bits(binary)
        yield PaddedForm(padded)

        blocks = split_into_blocks(padded)
        logger.debug("Message is %d bits, %d block(s) after padding", len(binary), len(blocks))

        for index, block in enumerate(blocks, start=1):
            ws = expand_message_schedule(block)
            yield Schedule(index, format_words(ws))

            last = None
            for values in iter_rounds(self.hash_state, ws):
                last = values
                yield RoundRecord.from_values(index, values)

            self.hash_state = update_hash_state(self.hash_state, last.state())
            self.blocks_processed = index
            logger.debug("Block %d folded into hash state", index)
            yield BlockDigest(index, format_words(self.hash_state))

        yield FinalDigest(hexdigest(self.hash_state))


def iter_stages(text: str, encoding: str = "strict") -> Iterator[Stage]:
    """Yield every stage of hashing `text`, in order."""
    return HashComputation(text, encoding).stages()


def compute(
    text: str,
    observer: Optional[Observer] = None,
    encoding: str = "strict",
) -> str:
    """Return the SHA-256 hex digest of `text`.

    `observer`, if given, is called synchronously with each stage before
    the next one is computed.
    """
    digest = None
    for stage in iter_stages(text, encoding):
        if observer is not None:
            observer(stage)
        if isinstance(stage, FinalDigest):
            digest = stage.digest

    logger.info("Computed digest %s... for %d character(s)", digest[:16], len(text))
    return digest


@dataclass
class BlockTrace:
    """All observations belonging to one block."""

    index: int
    schedule: Tuple[str, ...] = ()
    rounds: List[RoundRecord] = field(default_factory=list)
    registers: Tuple[str, ...] = ()


@dataclass
class Trace:
    """A complete, materialized observation sequence for one input."""

    text: str
    encoding: str
    binary: str = ""
    padded: str = ""
    blocks: List[BlockTrace] = field(default_factory=list)
    digest: str = ""

    @property
    def block_count(self) -> int:
        return len(self.blocks)

    def observe(self, stage: Stage) -> None:
        """Accumulate one stage; stages must arrive in emission order."""
        if isinstance(stage, BinaryForm):
            self.binary = stage.bits
        elif isinstance(stage, PaddedForm):
            self.padded = stage.bits
        elif isinstance(stage, Schedule):
            self.blocks.append(BlockTrace(index=stage.block, schedule=stage.words))
        elif isinstance(stage, RoundRecord):
            self._block(stage.block).rounds.append(stage)
        elif isinstance(stage, BlockDigest):
            self._block(stage.block).registers = stage.registers
        elif isinstance(stage, FinalDigest):
            self.digest = stage.digest
        else:
            raise TypeError(f"Unknown stage type: {type(stage).__name__}")

    def _block(self, index: int) -> BlockTrace:
        if not self.blocks or self.blocks[-1].index != index:
            raise ValueError(f"Stage for block {index} arrived before its schedule")
        return self.blocks[-1]


def collect_trace(text: str, encoding: str = "strict") -> Trace:
    """Run the computation and gather every stage into a `Trace`."""
    trace = Trace(text=text, encoding=encoding)
    compute(text, observer=trace.observe, encoding=encoding)
    return trace
