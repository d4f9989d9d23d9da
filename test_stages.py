import hashlib

import pytest

from sha256_errors import InvalidInput, LengthOverflow
from stages import (
    BinaryForm,
    BlockDigest,
    FinalDigest,
    HashComputation,
    PaddedForm,
    RoundRecord,
    Schedule,
    collect_trace,
    compute,
    iter_stages,
)


KNOWN_VECTORS = [
    ("", "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"),
    ("abc", "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"),
    (
        "abcdbcdecdefdefgefghfghighijhijkijkljklmklmnlmnomnopnopq",
        "248d6a61d20638b8e5c026930c3e6039a33ce45964ff2167f6ecedd419db06c1",
    ),
]

SAMPLE_INPUTS = [
    "",
    "a",
    "hello world",
    "The quick brown fox jumps over the lazy dog",
    "x" * 55,
    "x" * 56,
    "y" * 64,
    "z" * 200,
    "Test message with various characters: !@#$%^&*()",
]


@pytest.mark.parametrize("text,expected", KNOWN_VECTORS)
def test_known_vectors(text, expected):
    """compute matches the published SHA-256 test vectors."""
    assert compute(text) == expected


@pytest.mark.parametrize("text", SAMPLE_INPUTS)
def test_matches_hashlib(text):
    """compute agrees with hashlib for single-byte text."""
    assert compute(text) == hashlib.sha256(text.encode("latin-1")).hexdigest()


def test_strict_mode_uses_one_byte_per_latin1_character():
    assert compute("café") == hashlib.sha256("café".encode("latin-1")).hexdigest()


def test_utf8_mode_matches_hashlib():
    text = "日本語 ✓"
    assert compute(text, encoding="utf-8") == hashlib.sha256(text.encode("utf-8")).hexdigest()


def test_truncate_mode_hashes_low_bytes():
    assert compute("Ł", encoding="truncate") == compute("A")


@pytest.mark.parametrize("text", SAMPLE_INPUTS)
def test_stage_sequence_shape(text):
    """Binary, padded, then schedule/64 rounds/registers per block, then the digest."""
    stages = list(iter_stages(text))

    binary, padded = stages[0], stages[1]
    assert isinstance(binary, BinaryForm)
    assert isinstance(padded, PaddedForm)
    assert len(padded.bits) % 512 == 0
    assert len(padded.bits) >= len(binary.bits) + 1

    block_count = len(padded.bits) // 512
    assert len(stages) == 2 + block_count * (1 + 64 + 1) + 1

    for i in range(block_count):
        start = 2 + i * 66
        schedule = stages[start]
        rounds = stages[start + 1 : start + 65]
        block_digest = stages[start + 65]

        assert isinstance(schedule, Schedule)
        assert schedule.block == i + 1
        assert len(schedule.words) == 64
        assert all(isinstance(r, RoundRecord) and r.block == i + 1 for r in rounds)
        assert [r.round for r in rounds] == list(range(1, 65))
        assert isinstance(block_digest, BlockDigest)
        assert block_digest.block == i + 1

    final = stages[-1]
    assert isinstance(final, FinalDigest)
    assert len(final.digest) == 64
    int(final.digest, 16)


def test_hex_fields_are_fixed_width():
    """Every reported word is exactly 8 hex digits."""
    for stage in iter_stages("abc"):
        if isinstance(stage, RoundRecord):
            for value in stage.to_dict().values():
                if isinstance(value, str) and value != "round_record":
                    assert len(value) == 8
        elif isinstance(stage, (Schedule, BlockDigest)):
            words = stage.words if isinstance(stage, Schedule) else stage.registers
            assert all(len(word) == 8 for word in words)


@pytest.mark.parametrize("length,blocks", [(55, 1), (56, 2)])
def test_single_block_boundary(length, blocks):
    """55 characters fit in one block, 56 need two."""
    stages = list(iter_stages("q" * length))

    assert sum(isinstance(s, Schedule) for s in stages) == blocks
    assert sum(isinstance(s, BlockDigest) for s in stages) == blocks


def test_last_block_digest_is_final_digest():
    stages = list(iter_stages("z" * 200))
    last_block = [s for s in stages if isinstance(s, BlockDigest)][-1]

    assert "".join(last_block.registers) == stages[-1].digest


def test_determinism():
    """Hashing the same text twice reports identical stages."""
    assert list(iter_stages("determinism")) == list(iter_stages("determinism"))


def test_interleaved_computations_are_isolated():
    """Two computations advanced in lockstep do not share state."""
    first = iter_stages("abc")
    second = iter_stages("z" * 120)

    interleaved_first, interleaved_second = [], []
    for a, b in zip(first, second):
        interleaved_first.append(a)
        interleaved_second.append(b)
    interleaved_second.extend(second)

    assert interleaved_first == list(iter_stages("abc"))
    assert interleaved_second == list(iter_stages("z" * 120))


def test_observer_sees_stages_in_order():
    seen = []
    digest = compute("abc", observer=seen.append)

    assert seen == list(iter_stages("abc"))
    assert seen[-1] == FinalDigest(digest)


def test_invalid_input_emits_nothing():
    """Unencodable text fails before the first stage."""
    seen = []
    with pytest.raises(InvalidInput):
        compute("abc日", observer=seen.append)
    assert seen == []


def test_hash_computation_runs_once():
    computation = HashComputation("abc")
    list(computation.stages())

    assert computation.blocks_processed == 1
    with pytest.raises(RuntimeError):
        list(computation.stages())


def test_collect_trace_groups_by_block():
    """collect_trace groups schedule, rounds and registers by block."""
    trace = collect_trace("z" * 100)

    assert trace.block_count == 2
    assert trace.binary == "01111010" * 100
    assert len(trace.padded) == 1024
    assert [block.index for block in trace.blocks] == [1, 2]
    for block in trace.blocks:
        assert len(block.schedule) == 64
        assert len(block.rounds) == 64
        assert len(block.registers) == 8
    assert trace.digest == hashlib.sha256(b"z" * 100).hexdigest()


def test_trace_rejects_out_of_order_stages():
    trace = collect_trace("abc")
    with pytest.raises(ValueError):
        trace.observe(BlockDigest(5, ("0" * 8,) * 8))


def _overflowing_pad(bits):
    raise LengthOverflow(2 ** 64)


def test_length_overflow_stops_after_binary_form(monkeypatch):
    """A length that does not fit in 64 bits ends the run right after BinaryForm."""
    monkeypatch.setattr("stages.pad_bits", _overflowing_pad)

    with pytest.raises(LengthOverflow):
        list(iter_stages("abc"))

    seen = []
    with pytest.raises(LengthOverflow):
        compute("abc", observer=seen.append)
    assert seen == [BinaryForm("011000010110001001100011")]


def test_utf8_lone_surrogate_emits_nothing():
    """Text with no UTF-8 form fails before the first stage."""
    seen = []
    with pytest.raises(InvalidInput):
        compute("ab\udcff", observer=seen.append, encoding="utf-8")
    assert seen == []
